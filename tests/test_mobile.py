from site_grader.checks.mobile import check_mobile, small_font_count, unminified_assets
from site_grader.document import HtmlDocument
from site_grader.models import Priority

VIEWPORT = '<meta name="viewport" content="width=device-width, initial-scale=1">'


def doc(head="", body=""):
    return HtmlDocument(f"<html><head>{head}</head><body>{body}</body></html>")


def test_mobile_friendly_page():
    head = VIEWPORT + '<link rel="stylesheet" href="/app.min.css">'
    body = '<img src="a.webp" width="10" height="10"><script src="/app.min.js"></script>'
    result = check_mobile(doc(head, body))
    assert result.score == 100


def test_missing_viewport():
    result = check_mobile(doc())
    viewport = result.findings[0]
    assert viewport.priority is Priority.CRITICAL
    assert result.score == 75


def test_viewport_without_device_width():
    result = check_mobile(doc('<meta name="viewport" content="initial-scale=1">'))
    assert result.score == 85


def test_small_inline_fonts():
    page = doc(VIEWPORT, '<p style="font-size: 10px">tiny</p><p style="font-size:14px">ok</p>')
    assert small_font_count(page) == 1
    assert check_mobile(page).score == 90


def test_images_without_dimensions():
    result = check_mobile(doc(VIEWPORT, '<img src="a.webp" width="10"><img src="b.webp">'))
    assert result.score == 90


def test_unminified_assets():
    page = doc(VIEWPORT + '<link rel="stylesheet" href="/css/site.css?v=3">', '<script src="https://cdn.example.com/lib.js"></script>')
    assert unminified_assets(page) == ["lib.js", "site.css"]
    assert check_mobile(page).score == 95


def test_redirect_chain():
    assert check_mobile(doc(VIEWPORT), redirect_count=1).score == 100
    assert check_mobile(doc(VIEWPORT), redirect_count=2).score == 95


def test_unparseable_asset_urls_are_ignored():
    head = VIEWPORT + '<link rel="stylesheet" href="http://[cdn/site.css">'
    body = '<script src="http://[cdn/app.js"></script>'
    assert unminified_assets(doc(head, body)) == []
    assert check_mobile(doc(head, body)).score == 100
