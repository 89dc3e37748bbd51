"""Search engine optimization checks."""

import math
from typing import Optional

from ..document import HtmlDocument
from ..models import Category, CheckResult, Finding, Outcome, Priority
from ..probes import ProbeClient, ProbeResult, ProbeStatus
from ..scoring import single_dimension
from ..urls import base_url


SEO = Category.SEO.value

TITLE_RANGE = (30, 70)
DESCRIPTION_RANGE = (120, 160)
ALT_TEXT_BLOCK = 5
ALT_TEXT_PENALTY = 5
ALT_TEXT_CAP = 20


def title_outcome(doc: HtmlDocument, category: Category, bucket: str, subcategory: str = "title") -> Outcome:
    """Shared title rule: -15 when missing, -5 outside 30-70 characters."""
    title = doc.title()
    low, high = TITLE_RANGE
    if not title:
        return Outcome(Finding(
            category=category,
            subcategory=subcategory,
            issue="Missing page title",
            impact="Page titles are crucial for SEO and user experience",
            priority=Priority.CRITICAL,
            how_to_fix="Add a <title> tag inside your <head> section with a descriptive title (50-60 characters recommended)",
            code_example="<title>Your Page Title (50-60 characters)</title>",
        ), {bucket: -15})
    if not low <= len(title) <= high:
        return Outcome(Finding(
            category=category,
            subcategory=subcategory,
            issue=f"Title length is {len(title)} characters (recommended: 50-60)",
            impact="Titles that are too short or too long may be truncated in search results",
            priority=Priority.IMPORTANT,
            how_to_fix="Adjust your title to be between 50-60 characters for optimal display",
        ), {bucket: -5})
    return Outcome(Finding(
        category=category,
        subcategory=subcategory,
        issue="Page title is present and well-optimized",
        impact="Good title length helps with click-through rates",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def description_outcome(doc: HtmlDocument, category: Category, bucket: str, subcategory: str = "meta-description") -> Outcome:
    """Shared description rule: -15 when missing, -5 outside 120-160 characters."""
    description = doc.meta(name="description")
    low, high = DESCRIPTION_RANGE
    if not description:
        return Outcome(Finding(
            category=category,
            subcategory=subcategory,
            issue="Missing meta description",
            impact="Meta descriptions help search engines understand your page and improve click-through rates",
            priority=Priority.CRITICAL,
            how_to_fix='Add <meta name="description" content="Your description here"> to your <head> section (150-160 characters recommended)',
            code_example='<meta name="description" content="Your description (150-160 characters)">',
        ), {bucket: -15})
    if not low <= len(description) <= high:
        return Outcome(Finding(
            category=category,
            subcategory=subcategory,
            issue=f"Meta description length is {len(description)} characters (recommended: 150-160)",
            impact="Descriptions that are too short or long may not display optimally in search results",
            priority=Priority.IMPORTANT,
            how_to_fix="Adjust your meta description to be between 150-160 characters",
        ), {bucket: -5})
    return Outcome(Finding(
        category=category,
        subcategory=subcategory,
        issue="Meta description is present and well-optimized",
        impact="Good descriptions improve search result appearance",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def _h1_outcome(doc: HtmlDocument) -> Outcome:
    count = len(doc.select_all("h1"))
    if count == 0:
        return Outcome(Finding(
            category=Category.SEO,
            subcategory="headings",
            issue="Missing H1 heading",
            impact="H1 tags help search engines understand your page's main topic",
            priority=Priority.CRITICAL,
            how_to_fix="Add an <h1> tag with your main page heading. Each page should have exactly one H1",
        ), {SEO: -10})
    if count > 1:
        return Outcome(Finding(
            category=Category.SEO,
            subcategory="headings",
            issue=f"Multiple H1 tags found ({count})",
            impact="Having multiple H1s can confuse search engines about your page's main topic",
            priority=Priority.IMPORTANT,
            how_to_fix="Use only one H1 tag per page. Use H2-H6 for subheadings",
        ), {SEO: -5})
    return Outcome(Finding(
        category=Category.SEO,
        subcategory="headings",
        issue="Single H1 heading present",
        impact="Proper heading structure helps SEO",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def alt_text_penalty(missing: int) -> int:
    """-5 per started block of five images, capped at -20."""
    return -min(ALT_TEXT_CAP, math.ceil(missing / ALT_TEXT_BLOCK) * ALT_TEXT_PENALTY)


def _alt_text_outcome(doc: HtmlDocument) -> Optional[Outcome]:
    images = doc.select_all("img")
    missing = sum(1 for img in images if not doc.attribute(img, "alt").strip())
    if missing:
        return Outcome(Finding(
            category=Category.SEO,
            subcategory="images",
            issue=f"{missing} of {len(images)} images missing alt text",
            impact="Alt text improves accessibility and helps search engines understand images",
            priority=Priority.CRITICAL if missing > 5 else Priority.IMPORTANT,
            how_to_fix="Add descriptive alt attributes to all <img> tags describing the image content",
        ), {SEO: alt_text_penalty(missing)})
    if images:
        return Outcome(Finding(
            category=Category.SEO,
            subcategory="images",
            issue=f"All {len(images)} images have alt text",
            impact="Good for accessibility and SEO",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return None


def _open_graph_outcome(doc: HtmlDocument) -> Outcome:
    tags = ("og:title", "og:description", "og:image")
    missing = [tag for tag in tags if not doc.meta(property=tag)]
    if missing:
        return Outcome(Finding(
            category=Category.SEO,
            subcategory="open-graph",
            issue=f"Missing Open Graph meta tags: {', '.join(missing)}",
            impact="Open Graph tags improve how your page appears when shared on social media",
            priority=Priority.OPTIONAL,
            how_to_fix="Add og:title, og:description, and og:image meta tags for better social sharing",
        ), {SEO: -5})
    return Outcome(Finding(
        category=Category.SEO,
        subcategory="open-graph",
        issue="Open Graph meta tags present",
        impact="Your page will display nicely when shared on social media",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def _resource_outcome(result: ProbeResult, name: str, impact: str, how_to_fix: str) -> Outcome:
    if result.found:
        return Outcome(Finding(
            category=Category.SEO,
            subcategory=name,
            issue=f"{name} found",
            impact=impact,
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    if result.status is ProbeStatus.ERROR:
        return Outcome(Finding(
            category=Category.SEO,
            subcategory=name,
            issue=f"Could not check {name} ({result.reason})",
            impact="Unable to verify this file is available to crawlers",
            priority=Priority.OPTIONAL,
            how_to_fix=f"Ensure /{name} is reachable and responds quickly",
        ))
    return Outcome(Finding(
        category=Category.SEO,
        subcategory=name,
        issue=f"No {name} found",
        impact=impact,
        priority=Priority.OPTIONAL,
        how_to_fix=how_to_fix,
    ), {SEO: -5})


def check_seo(doc: HtmlDocument, url: str, probes: ProbeClient) -> CheckResult:
    """Check on-page SEO basics plus robots.txt and sitemap.xml."""
    base = base_url(url)
    outcomes = [
        title_outcome(doc, Category.SEO, SEO),
        description_outcome(doc, Category.SEO, SEO),
        _h1_outcome(doc),
        _alt_text_outcome(doc),
        _open_graph_outcome(doc),
        _resource_outcome(
            probes.robots_txt(base),
            "robots.txt",
            impact="robots.txt tells crawlers which pages they may visit",
            how_to_fix="Create a robots.txt file in your site root",
        ),
        _resource_outcome(
            probes.sitemap_xml(base),
            "sitemap.xml",
            impact="Sitemaps help crawlers discover all of your pages",
            how_to_fix="Publish /sitemap.xml listing your important pages",
        ),
    ]
    return single_dimension(SEO, [o for o in outcomes if o is not None])
