"""Mobile optimization checks."""

import re

from ..document import HtmlDocument
from ..models import Category, CheckResult, Finding, Outcome, Priority
from ..scoring import single_dimension
from ..urls import path_of


MOBILE = Category.MOBILE.value

MIN_FONT_PX = 12
_FONT_SIZE = re.compile(r"font-size\s*:\s*(\d+(?:\.\d+)?)px", re.IGNORECASE)


def _viewport_outcome(doc: HtmlDocument) -> Outcome:
    viewport = doc.meta(name="viewport")
    if not viewport:
        return Outcome(Finding(
            category=Category.MOBILE,
            subcategory="viewport",
            issue="Missing viewport meta tag",
            impact="Mobile browsers will render the page at desktop width and shrink it",
            priority=Priority.CRITICAL,
            how_to_fix="Add a responsive viewport meta tag to your <head>",
            code_example='<meta name="viewport" content="width=device-width, initial-scale=1">',
        ), {MOBILE: -25})
    if "width=device-width" not in viewport.replace(" ", "").lower():
        return Outcome(Finding(
            category=Category.MOBILE,
            subcategory="viewport",
            issue="Viewport missing width=device-width",
            impact="The layout will not adapt to the device's screen width",
            priority=Priority.IMPORTANT,
            how_to_fix="Include width=device-width in the viewport content",
            code_example='<meta name="viewport" content="width=device-width, initial-scale=1">',
        ), {MOBILE: -15})
    return Outcome(Finding(
        category=Category.MOBILE,
        subcategory="viewport",
        issue="Responsive viewport configured",
        impact="The page adapts to mobile screen widths",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def small_font_count(doc: HtmlDocument) -> int:
    count = 0
    for el in doc.select_all("[style]"):
        for size in _FONT_SIZE.findall(doc.attribute(el, "style")):
            if float(size) < MIN_FONT_PX:
                count += 1
    return count


def _fonts_outcome(doc: HtmlDocument) -> Outcome:
    count = small_font_count(doc)
    if count:
        return Outcome(Finding(
            category=Category.MOBILE,
            subcategory="fonts",
            issue=f"{count} inline font size(s) below {MIN_FONT_PX}px",
            impact="Small text is hard to read on phones and forces zooming",
            priority=Priority.IMPORTANT,
            how_to_fix="Use a base font size of at least 16px and avoid inline sizes below 12px",
        ), {MOBILE: -10})
    return Outcome(Finding(
        category=Category.MOBILE,
        subcategory="fonts",
        issue="No undersized inline fonts",
        impact="Text is legible without zooming",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def _image_dimensions_outcome(doc: HtmlDocument) -> Outcome | None:
    images = doc.select_all("img")
    missing = sum(
        1 for img in images
        if not (doc.has_attribute(img, "width") and doc.has_attribute(img, "height"))
    )
    if missing:
        return Outcome(Finding(
            category=Category.MOBILE,
            subcategory="images",
            issue=f"{missing} of {len(images)} images missing width/height",
            impact="Images without dimensions cause layout shifts while loading",
            priority=Priority.IMPORTANT,
            how_to_fix="Set width and height attributes on every <img>",
            code_example='<img src="photo.webp" width="800" height="600" alt="...">',
        ), {MOBILE: -10})
    if images:
        return Outcome(Finding(
            category=Category.MOBILE,
            subcategory="images",
            issue="All images declare their dimensions",
            impact="The browser can reserve space before images load",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return None


def unminified_assets(doc: HtmlDocument) -> list[str]:
    """Linked CSS/JS files whose names don't look minified."""
    refs = [doc.attribute(s, "src") for s in doc.select_all("script[src]")]
    refs += [doc.attribute(link, "href") for link in doc.select_all('link[rel~="stylesheet"][href]')]
    names = []
    for ref in refs:
        path = path_of(ref).lower()
        if path.endswith((".js", ".css")) and ".min." not in path:
            names.append(path.rsplit("/", 1)[-1])
    return names


def _minification_outcome(doc: HtmlDocument) -> Outcome:
    names = unminified_assets(doc)
    if names:
        shown = ", ".join(names[:3]) + (" ..." if len(names) > 3 else "")
        return Outcome(Finding(
            category=Category.MOBILE,
            subcategory="assets",
            issue=f"Unminified CSS/JS detected ({shown})",
            impact="Unminified files waste bandwidth on mobile connections",
            priority=Priority.OPTIONAL,
            how_to_fix="Minify CSS and JavaScript as part of your build",
        ), {MOBILE: -5})
    return Outcome(Finding(
        category=Category.MOBILE,
        subcategory="assets",
        issue="No unminified CSS/JS detected",
        impact="Assets are compact",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def _redirects_outcome(redirect_count: int) -> Outcome:
    if redirect_count > 1:
        return Outcome(Finding(
            category=Category.MOBILE,
            subcategory="redirects",
            issue=f"Multiple redirects detected ({redirect_count})",
            impact="Each redirect adds a round trip, which is slow on mobile networks",
            priority=Priority.OPTIONAL,
            how_to_fix="Link directly to the final URL and collapse redirect chains",
        ), {MOBILE: -5})
    return Outcome(Finding(
        category=Category.MOBILE,
        subcategory="redirects",
        issue="No redirect chain",
        impact="The page is reached in a single hop",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def check_mobile(doc: HtmlDocument, redirect_count: int = 0) -> CheckResult:
    outcomes = [
        _viewport_outcome(doc),
        _fonts_outcome(doc),
        _image_dimensions_outcome(doc),
        _minification_outcome(doc),
        _redirects_outcome(redirect_count),
    ]
    return single_dimension(MOBILE, [o for o in outcomes if o is not None])
