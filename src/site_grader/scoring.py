"""Score folding, weighting and grading."""

from typing import Iterable, Mapping, Sequence

from .models import Category, CheckResult, Finding, Outcome


BASELINE = 100

# The overall report is the plain mean of these six dimensions.
PRIMARY_WEIGHTS = {
    Category.SEO.value: 1,
    Category.SECURITY.value: 1,
    Category.PERFORMANCE.value: 1,
    Category.KEYWORDS.value: 1,
    Category.ACCESSIBILITY.value: 1,
    Category.MOBILE.value: 1,
}


def clamp(score: float, low: int = 0, high: int = 100) -> int:
    return int(max(low, min(high, score)))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, like Math.round."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def fold(outcomes: Iterable[Outcome], buckets: Sequence[str]) -> tuple[dict[str, int], list[Finding]]:
    """Apply every outcome's deltas to a baseline of 100 per bucket.

    Each bucket is clamped to [0, 100] once, after all deltas are summed,
    so bonuses can offset penalties before clamping.
    """
    totals = {bucket: BASELINE for bucket in buckets}
    findings: list[Finding] = []
    for outcome in outcomes:
        findings.append(outcome.finding)
        for bucket, delta in outcome.deltas.items():
            if bucket not in totals:
                raise KeyError(f"Unknown score bucket: {bucket}")
            totals[bucket] += delta
    return {bucket: clamp(total) for bucket, total in totals.items()}, findings


def weighted_score(scores: Mapping[str, int], weights: Mapping[str, int]) -> int:
    """Combine scores with integer weights, rounding half up."""
    used = {k: w for k, w in weights.items() if k in scores}
    total_weight = sum(used.values())
    if total_weight == 0:
        return 0
    weighted = sum(scores[k] * w for k, w in used.items())
    return clamp(round_half_up(weighted / total_weight))


def single_dimension(name: str, outcomes: Iterable[Outcome], metadata: dict | None = None) -> CheckResult:
    """Build a CheckResult for an analyzer with one score bucket."""
    totals, findings = fold(outcomes, [name])
    return CheckResult(
        name=name,
        score=totals[name],
        findings=findings,
        metadata=metadata or {},
    )


def multi_dimension(
    name: str,
    outcomes: Iterable[Outcome],
    weights: Mapping[str, int],
    metadata: dict | None = None,
) -> CheckResult:
    """Build a CheckResult whose score is a weighted mix of sub-scores."""
    breakdown, findings = fold(outcomes, list(weights))
    return CheckResult(
        name=name,
        score=weighted_score(breakdown, weights),
        findings=findings,
        breakdown=breakdown,
        metadata=metadata or {},
    )


def overall_score(checks: Iterable[CheckResult]) -> int:
    scores = {c.name: c.score for c in checks}
    return weighted_score(scores, PRIMARY_WEIGHTS)


def grade_letter(score: int) -> str:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"
