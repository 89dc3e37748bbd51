import httpx

from site_grader.checks.seo import alt_text_penalty, check_seo
from site_grader.document import HtmlDocument
from site_grader.models import Priority

URL = "https://example.com/"

OG_TAGS = """
<meta property="og:title" content="Example">
<meta property="og:description" content="An example page">
<meta property="og:image" content="https://example.com/og.png">
"""

SITE = {
    "/robots.txt": (200, "User-agent: *\nAllow: /\n"),
    "/sitemap.xml": (200, "<urlset></urlset>"),
}


def page(head="", body="<h1>Welcome</h1>"):
    return HtmlDocument(f"<html><head>{head}</head><body>{body}</body></html>")


def issues(result):
    return [f.issue for f in result.findings if not f.passed]


def test_missing_title_and_description(make_probes):
    result = check_seo(page(OG_TAGS), URL, make_probes(SITE))
    assert result.score == 70
    assert issues(result) == ["Missing page title", "Missing meta description"]


def test_well_formed_page_scores_full(make_probes):
    head = (
        "<title>Example Widgets - Handmade widgets for every team</title>"
        f'<meta name="description" content="{"d" * 140}">'
        + OG_TAGS
    )
    result = check_seo(page(head, '<h1>Widgets</h1><img src="a.webp" alt="A widget">'), URL, make_probes(SITE))
    assert result.score == 100
    assert all(f.passed for f in result.findings)


def test_length_rules(make_probes):
    head = "<title>Short</title>" + '<meta name="description" content="Too short.">' + OG_TAGS
    result = check_seo(page(head), URL, make_probes(SITE))
    assert result.score == 90
    assert any("Title length is 5" in i for i in issues(result))


def test_heading_rules(make_probes):
    head = "<title>Example Widgets - Handmade widgets for every team</title>" + OG_TAGS
    none = check_seo(page(head, "<p>No heading</p>"), URL, make_probes(SITE))
    assert "Missing H1 heading" in issues(none)

    many = check_seo(page(head, "<h1>One</h1><h1>Two</h1>"), URL, make_probes(SITE))
    assert "Multiple H1 tags found (2)" in issues(many)


def test_alt_text_penalty_blocks():
    assert alt_text_penalty(1) == -5
    assert alt_text_penalty(5) == -5
    assert alt_text_penalty(6) == -10
    assert alt_text_penalty(40) == -20


def test_alt_text_priority(make_probes):
    images = "".join(f'<img src="{i}.png">' for i in range(6))
    result = check_seo(page(OG_TAGS, "<h1>Hi</h1>" + images), URL, make_probes(SITE))
    alt = next(f for f in result.findings if f.subcategory == "images")
    assert alt.priority is Priority.CRITICAL
    assert alt.issue == "6 of 6 images missing alt text"


def test_missing_open_graph_and_resources(make_probes):
    result = check_seo(page(), URL, make_probes({}))
    # title -15, description -15, OG -5, robots -5, sitemap -5
    assert result.score == 55
    assert "No robots.txt found" in issues(result)
    assert "No sitemap.xml found" in issues(result)


def test_probe_errors_are_not_penalized(make_probes):
    probes = make_probes({
        "/robots.txt": httpx.ConnectError("refused"),
        "/sitemap.xml": httpx.ReadTimeout("slow"),
    })
    result = check_seo(page(OG_TAGS), URL, probes)
    assert result.score == 70
    failed = [f for f in result.findings if f.subcategory in ("robots.txt", "sitemap.xml")]
    assert all(not f.passed and f.priority is Priority.OPTIONAL for f in failed)
    assert failed[1].issue == "Could not check sitemap.xml (timeout)"
