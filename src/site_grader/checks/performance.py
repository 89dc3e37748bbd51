"""Performance score: taken from Lighthouse when available, estimated otherwise."""

from typing import Mapping, Optional

from ..document import HtmlDocument
from ..models import Category, CheckResult, Finding, Outcome, Priority
from ..scoring import clamp, single_dimension
from ..urls import host_of, path_of, resolve


PERFORMANCE = Category.PERFORMANCE.value

MB = 1024 * 1024
LEGACY_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp")
CACHE_HEADERS = ("cache-control", "etag", "expires", "last-modified")


def _lighthouse_result(score: int) -> CheckResult:
    score = clamp(score)
    if score < 50:
        finding = Finding(
            category=Category.PERFORMANCE,
            subcategory="lighthouse",
            issue=f"Performance score is {score}/100 (poor)",
            impact="Slow sites lose visitors and rank lower in search results",
            priority=Priority.CRITICAL,
            how_to_fix="Optimize images, enable compression, minimize JavaScript, and use a CDN",
        )
    elif score < 80:
        finding = Finding(
            category=Category.PERFORMANCE,
            subcategory="lighthouse",
            issue=f"Performance score is {score}/100 (needs improvement)",
            impact="Page speed affects user experience and SEO",
            priority=Priority.IMPORTANT,
            how_to_fix="Consider image optimization, code splitting, and caching strategies",
        )
    else:
        finding = Finding(
            category=Category.PERFORMANCE,
            subcategory="lighthouse",
            issue=f"Performance score is {score}/100 (good)",
            impact="Fast loading improves user experience and SEO",
            priority=Priority.OPTIONAL,
            passed=True,
        )
    return CheckResult(
        name=PERFORMANCE,
        score=score,
        findings=[finding],
        metadata={"mode": "lighthouse"},
    )


def _page_weight_outcome(size: int) -> Outcome:
    megabytes = size / MB
    if size > 5 * MB:
        penalty = -20
    elif size > 3 * MB:
        penalty = -10
    else:
        return Outcome(Finding(
            category=Category.PERFORMANCE,
            subcategory="page-weight",
            issue=f"Page weight is {megabytes:.2f} MB",
            impact="Lightweight pages load quickly on slow connections",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return Outcome(Finding(
        category=Category.PERFORMANCE,
        subcategory="page-weight",
        issue=f"Large page size ({megabytes:.1f} MB)",
        impact="Heavy pages take longer to download and parse, especially on mobile",
        priority=Priority.IMPORTANT,
        how_to_fix="Remove unused markup and inline data, and load large content lazily",
    ), {PERFORMANCE: penalty})


def _external_scripts(doc: HtmlDocument, url: str) -> int:
    host = host_of(url)
    count = 0
    for script in doc.select_all("script[src]"):
        # unparseable sources count as neither local nor external
        src_host = host_of(resolve(url, doc.attribute(script, "src")))
        if src_host and src_host != host:
            count += 1
    return count


def _scripts_outcome(count: int) -> Outcome:
    if count > 15:
        penalty = -15
    elif count > 10:
        penalty = -10
    elif count > 5:
        penalty = -5
    else:
        return Outcome(Finding(
            category=Category.PERFORMANCE,
            subcategory="scripts",
            issue=f"{count} external script(s)",
            impact="Few third-party scripts keep the main thread free",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return Outcome(Finding(
        category=Category.PERFORMANCE,
        subcategory="scripts",
        issue=f"Many external scripts ({count})",
        impact="Each third-party script adds DNS lookups, downloads and main-thread work",
        priority=Priority.IMPORTANT,
        how_to_fix="Remove unused third-party scripts, and load the rest with async or defer",
    ), {PERFORMANCE: penalty})


def _legacy_images(doc: HtmlDocument) -> int:
    count = 0
    for img in doc.select_all("img[src]"):
        path = path_of(doc.attribute(img, "src")).lower()
        if path.endswith(LEGACY_IMAGE_EXTENSIONS):
            count += 1
    return count


def _images_outcome(count: int) -> Outcome:
    if count == 0:
        return Outcome(Finding(
            category=Category.PERFORMANCE,
            subcategory="images",
            issue="No legacy-format images detected",
            impact="Modern formats such as WebP and AVIF are smaller at the same quality",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return Outcome(Finding(
        category=Category.PERFORMANCE,
        subcategory="images",
        issue=f"{count} image(s) served in legacy formats",
        impact="JPEG, PNG and GIF files are usually larger than WebP or AVIF equivalents",
        priority=Priority.IMPORTANT,
        how_to_fix="Serve images as WebP or AVIF, using <picture> for fallbacks",
        code_example='<picture>\n  <source srcset="hero.avif" type="image/avif">\n  <img src="hero.jpg" alt="...">\n</picture>',
    ), {PERFORMANCE: -10 if count >= 5 else -5})


def _caching_outcome(headers: Mapping[str, str]) -> Outcome:
    present = [h for h in CACHE_HEADERS if headers.get(h)]
    if present:
        return Outcome(Finding(
            category=Category.PERFORMANCE,
            subcategory="caching",
            issue=f"Caching headers present ({', '.join(present)})",
            impact="Repeat visits can reuse cached responses",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return Outcome(Finding(
        category=Category.PERFORMANCE,
        subcategory="caching",
        issue="No caching headers",
        impact="Browsers and CDNs must refetch the page on every visit",
        priority=Priority.OPTIONAL,
        how_to_fix="Send Cache-Control (and ETag or Last-Modified) headers",
        code_example="Cache-Control: public, max-age=300",
    ), {PERFORMANCE: -5})


def check_performance(
    doc: HtmlDocument,
    url: str,
    headers: Mapping[str, str],
    lighthouse_score: Optional[int] = None,
) -> CheckResult:
    """Use an upstream Lighthouse score if given, else estimate from the page."""
    if lighthouse_score is not None:
        return _lighthouse_result(lighthouse_score)

    headers = {k.lower(): v for k, v in headers.items()}
    size = len(doc.html.encode("utf-8"))
    scripts = _external_scripts(doc, url)
    legacy = _legacy_images(doc)
    outcomes = [
        _page_weight_outcome(size),
        _scripts_outcome(scripts),
        _images_outcome(legacy),
        _caching_outcome(headers),
    ]
    return single_dimension(PERFORMANCE, outcomes, metadata={
        "mode": "estimated",
        "page_bytes": size,
        "external_scripts": scripts,
        "legacy_images": legacy,
    })
