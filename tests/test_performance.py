from site_grader.checks.performance import check_performance
from site_grader.document import HtmlDocument
from site_grader.models import Priority

URL = "https://example.com/"
CACHED = {"Cache-Control": "max-age=300"}


def doc(body=""):
    return HtmlDocument(f"<html><head></head><body>{body}</body></html>")


def test_lighthouse_score_is_used_directly():
    result = check_performance(doc(), URL, {}, lighthouse_score=42)
    assert result.score == 42
    assert result.metadata == {"mode": "lighthouse"}
    assert result.findings[0].priority is Priority.CRITICAL

    assert check_performance(doc(), URL, {}, lighthouse_score=75).findings[0].priority is Priority.IMPORTANT
    assert check_performance(doc(), URL, {}, lighthouse_score=95).findings[0].passed
    assert check_performance(doc(), URL, {}, lighthouse_score=140).score == 100


def test_light_page_estimates_full_score():
    result = check_performance(doc("<p>Hello</p>"), URL, CACHED)
    assert result.score == 100
    assert result.metadata["mode"] == "estimated"


def test_external_scripts_tiers():
    def scripts(n):
        return "".join(f'<script src="https://cdn{i}.example.net/x.js"></script>' for i in range(n))

    assert check_performance(doc(scripts(5)), URL, CACHED).score == 100
    assert check_performance(doc(scripts(6)), URL, CACHED).score == 95
    assert check_performance(doc(scripts(11)), URL, CACHED).score == 90
    assert check_performance(doc(scripts(16)), URL, CACHED).score == 85


def test_same_host_scripts_are_not_external():
    body = '<script src="/app.js"></script>' * 8 + '<script src="https://example.com/b.js"></script>'
    result = check_performance(doc(body), URL, CACHED)
    assert result.metadata["external_scripts"] == 0
    assert result.metadata["legacy_images"] == 0


def test_legacy_images():
    few = "".join(f'<img src="/p{i}.jpg">' for i in range(4))
    many = "".join(f'<img src="/p{i}.png?v=2">' for i in range(5))
    assert check_performance(doc(few), URL, CACHED).score == 95
    assert check_performance(doc(many), URL, CACHED).score == 90
    assert check_performance(doc('<img src="/p.webp">'), URL, CACHED).score == 100


def test_page_weight():
    big = doc("<p>" + "x" * (3 * 1024 * 1024 + 10) + "</p>")
    huge = doc("<p>" + "x" * (5 * 1024 * 1024 + 10) + "</p>")
    assert check_performance(big, URL, CACHED).score == 90
    assert check_performance(huge, URL, CACHED).score == 80


def test_missing_caching_headers():
    result = check_performance(doc(), URL, {})
    assert result.score == 95
    caching = result.findings[-1]
    assert caching.subcategory == "caching"
    assert caching.priority is Priority.OPTIONAL
    assert check_performance(doc(), URL, {"ETag": '"abc"'}).score == 100


def test_unparseable_asset_urls_are_skipped():
    body = '<script src="http://[cdn/app.js"></script><img src="http://[cdn/photo.png">'
    result = check_performance(doc(body), URL, CACHED)
    assert result.score == 100
    assert result.metadata["external_scripts"] == 0
    assert result.metadata["legacy_images"] == 0
