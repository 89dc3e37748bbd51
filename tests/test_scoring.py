import pytest

from site_grader.models import Category, CheckResult, Finding, Outcome, Priority
from site_grader.scoring import (
    clamp,
    fold,
    grade_letter,
    multi_dimension,
    overall_score,
    round_half_up,
    single_dimension,
    weighted_score,
)


def failed(deltas):
    finding = Finding(
        category=Category.SEO,
        subcategory="test",
        issue="broken",
        impact="bad",
        priority=Priority.IMPORTANT,
        how_to_fix="fix it",
    )
    return Outcome(finding, deltas)


def passed(deltas=None):
    finding = Finding(
        category=Category.SEO,
        subcategory="test",
        issue="fine",
        impact="good",
        priority=Priority.OPTIONAL,
        passed=True,
    )
    return Outcome(finding, deltas or {})


def test_clamp():
    assert clamp(-5) == 0
    assert clamp(130) == 100
    assert clamp(42) == 42


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.4999) == 2
    assert round_half_up(0) == 0


def test_fold_sums_then_clamps_once():
    # a bonus offsets a later penalty before the clamp
    scores, findings = fold([passed({"a": 10}), failed({"a": -15})], ["a"])
    assert scores == {"a": 95}
    assert len(findings) == 2


def test_fold_clamps_bonus_headroom():
    scores, _ = fold([passed({"a": 10})], ["a"])
    assert scores == {"a": 100}


def test_fold_floors_at_zero():
    scores, _ = fold([failed({"a": -60}), failed({"a": -60})], ["a", "b"])
    assert scores == {"a": 0, "b": 100}


def test_fold_rejects_unknown_bucket():
    with pytest.raises(KeyError):
        fold([failed({"nope": -5})], ["a"])


def test_fold_keeps_order():
    outcomes = [failed({}), passed(), failed({})]
    _, findings = fold(outcomes, ["a"])
    assert [f.passed for f in findings] == [False, True, False]


def test_weighted_score_rounds_half_up():
    # (100*1 + 85*1) / 2 = 92.5
    assert weighted_score({"a": 100, "b": 85}, {"a": 1, "b": 1}) == 93


def test_weighted_score_ignores_missing_dimensions():
    assert weighted_score({"a": 50}, {"a": 1, "b": 3}) == 50
    assert weighted_score({}, {"a": 1}) == 0


def test_single_and_multi_dimension():
    single = single_dimension("seo", [failed({"seo": -15})])
    assert single.score == 85
    assert single.breakdown == {}

    multi = multi_dimension("ai", [failed({"x": -40})], {"x": 30, "y": 70})
    assert multi.breakdown == {"x": 60, "y": 100}
    assert multi.score == 88


def test_overall_is_mean_of_primary_dimensions():
    checks = [
        CheckResult(name=name, score=score)
        for name, score in [
            ("seo", 70), ("security", 45), ("performance", 90),
            ("keywords", 85), ("accessibility", 80), ("mobile", 100),
        ]
    ]
    # reported-only dimensions do not move the overall score
    checks.append(CheckResult(name="email", score=0))
    assert overall_score(checks) == 78


@pytest.mark.parametrize("score,grade", [
    (100, "A"), (90, "A"), (89, "B"), (80, "B"), (79, "C"),
    (70, "C"), (69, "D"), (60, "D"), (59, "F"), (0, "F"),
])
def test_grade_letter(score, grade):
    assert grade_letter(score) == grade
