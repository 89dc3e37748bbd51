"""Social preview card validation.

Checks what Facebook, LinkedIn, Slack and Twitter/X need to render a rich
link preview: meta and Open Graph tags, the og:image itself, Twitter Card
tags, server response time and canonical markup.
"""

from typing import Optional

from ..document import HtmlDocument
from ..imaging import ImageSize
from ..models import Category, CheckResult, Finding, Outcome, Priority
from ..probes import ProbeClient
from ..scoring import multi_dimension
from ..urls import is_absolute, resolve
from .seo import description_outcome, title_outcome


META = "meta-tags"
OG = "og-tags"
TWITTER = "twitter-tags"
IMAGE = "image-spec"
TTFB = "ttfb"
SEMANTIC = "semantic"

WEIGHTS = {META: 20, OG: 25, TWITTER: 10, IMAGE: 20, TTFB: 15, SEMANTIC: 10}

IDEAL_SIZE = ImageSize(1200, 630)
IDEAL_ASPECT = 1.91
MIN_WIDTH = 600
MIN_HEIGHT = 315


def _finding(subcategory: str, issue: str, impact: str, priority: Priority,
             how_to_fix: str = "", code_example: Optional[str] = None, passed: bool = False) -> Finding:
    return Finding(
        category=Category.SOCIAL_CARD,
        subcategory=subcategory,
        issue=issue,
        impact=impact,
        priority=priority,
        how_to_fix=how_to_fix,
        code_example=code_example,
        passed=passed,
    )


def _og_tag_outcome(doc: HtmlDocument, tag: str, penalty: int, impact_missing: str, impact_present: str) -> Outcome:
    if doc.meta(property=tag):
        return Outcome(_finding(OG, f"{tag} is present", impact_present, Priority.OPTIONAL, passed=True))
    return Outcome(_finding(
        OG,
        f"Missing {tag} tag",
        impact_missing,
        Priority.IMPORTANT,
        f"Add an Open Graph {tag.split(':')[1]} tag",
        code_example=f'<meta property="{tag}" content="...">',
    ), {OG: penalty})


def image_size_outcome(size: Optional[ImageSize]) -> Outcome:
    """Judge og:image dimensions; unverifiable images are not penalized."""
    if size is None:
        return Outcome(_finding(
            IMAGE,
            "Could not verify og:image dimensions",
            "Unable to confirm the size; 1200×630 pixels displays best",
            Priority.OPTIONAL,
            passed=True,
        ))
    width, height = size.width, size.height
    if size == IDEAL_SIZE:
        return Outcome(_finding(
            IMAGE,
            "og:image has optimal dimensions (1200×630)",
            "Perfect size for social media previews",
            Priority.OPTIONAL,
            passed=True,
        ))
    aspect = size.aspect_ratio
    if width >= IDEAL_SIZE.width and abs(aspect - IDEAL_ASPECT) < 0.1:
        return Outcome(_finding(
            IMAGE,
            f"og:image dimensions {width}×{height} (good aspect ratio)",
            "Image will display well on social platforms",
            Priority.OPTIONAL,
            passed=True,
        ))
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        return Outcome(_finding(
            IMAGE,
            f"og:image too small ({width}×{height}, recommended: 1200×630)",
            "Image may appear blurry or be rejected by platforms",
            Priority.IMPORTANT,
            "Use a larger image, ideally 1200×630 pixels",
        ), {IMAGE: -20})
    if abs(aspect - IDEAL_ASPECT) > 0.3:
        return Outcome(_finding(
            IMAGE,
            f"og:image aspect ratio {aspect:.2f}:1 (recommended: 1.91:1)",
            "Image may be cropped awkwardly on social platforms",
            Priority.IMPORTANT,
            "Use 1.91:1 aspect ratio (e.g., 1200×630)",
        ), {IMAGE: -15})
    return Outcome(_finding(
        IMAGE,
        f"og:image dimensions {width}×{height}",
        "Image should display adequately on social platforms",
        Priority.OPTIONAL,
        passed=True,
    ))


def _og_image_outcomes(doc: HtmlDocument, url: str, probes: ProbeClient) -> tuple[list[Outcome], Optional[ImageSize]]:
    og_image = doc.meta(property="og:image")
    if not og_image:
        return [Outcome(_finding(
            OG,
            "Missing og:image tag",
            "No preview image will appear when shared on social media",
            Priority.CRITICAL,
            "Add an Open Graph image tag with a 1200×630 image",
            code_example='<meta property="og:image" content="https://example.com/image.jpg">',
        ), {OG: -30, IMAGE: -40})], None

    outcomes = [Outcome(_finding(
        OG,
        "og:image is present",
        "Social platforms will display your preview image",
        Priority.OPTIONAL,
        passed=True,
    ))]
    if not is_absolute(og_image):
        outcomes.append(Outcome(_finding(
            IMAGE,
            "og:image uses relative URL",
            "Social platforms may not be able to fetch the image",
            Priority.CRITICAL,
            "Use an absolute URL for og:image",
            code_example='<meta property="og:image" content="https://yourdomain.com/image.jpg">',
        ), {IMAGE: -25}))

    # Relative images are still measured at their resolved location
    image_url = resolve(url, og_image)
    size = probes.image_dimensions(image_url) if image_url else None
    outcomes.append(image_size_outcome(size))
    return outcomes, size


def _twitter_outcome(doc: HtmlDocument) -> Outcome:
    card = doc.meta(name="twitter:card")
    if not card:
        return Outcome(_finding(
            TWITTER,
            "Missing twitter:card tag",
            "Twitter/X will use default card format or OG fallback",
            Priority.IMPORTANT,
            "Add a Twitter Card type tag",
            code_example='<meta name="twitter:card" content="summary_large_image">',
        ), {TWITTER: -20})
    if card == "summary_large_image":
        return Outcome(_finding(
            TWITTER,
            "Using summary_large_image card (optimal)",
            "Links will display with large preview image on Twitter/X",
            Priority.OPTIONAL,
            passed=True,
        ))
    return Outcome(_finding(
        TWITTER,
        f"Using {card} card type",
        "Consider using summary_large_image for better visibility",
        Priority.OPTIONAL,
        passed=True,
    ))


def ttfb_outcome(ttfb_ms: Optional[int]) -> Outcome:
    if ttfb_ms is None:
        return Outcome(_finding(
            TTFB,
            "TTFB not measured",
            "Server response time was not part of this analysis",
            Priority.OPTIONAL,
            passed=True,
        ))
    if ttfb_ms < 300:
        return Outcome(_finding(
            TTFB,
            f"Excellent TTFB: {ttfb_ms}ms",
            "Fast response ensures crawlers and preview generators succeed",
            Priority.OPTIONAL,
            passed=True,
        ))
    if ttfb_ms < 800:
        return Outcome(_finding(
            TTFB,
            f"Acceptable TTFB: {ttfb_ms}ms (target: <300ms)",
            "Social preview generation should work reliably",
            Priority.OPTIONAL,
            "Add caching or a CDN to bring response time under 300ms",
        ), {TTFB: -10})
    if ttfb_ms < 1500:
        return Outcome(_finding(
            TTFB,
            f"Slow TTFB: {ttfb_ms}ms (target: <800ms)",
            "Some social platforms may timeout when generating previews",
            Priority.IMPORTANT,
            "Optimize server response time with caching, CDN, or faster hosting",
        ), {TTFB: -25})
    return Outcome(_finding(
        TTFB,
        f"Very slow TTFB: {ttfb_ms}ms (target: <800ms)",
        "Preview cards likely to fail on social platforms",
        Priority.CRITICAL,
        "Urgently optimize server response time",
    ), {TTFB: -40})


def _canonical_outcome(doc: HtmlDocument) -> Outcome:
    if doc.link_href("canonical"):
        return Outcome(_finding(
            SEMANTIC,
            "Canonical URL is set",
            "Helps prevent duplicate content issues",
            Priority.OPTIONAL,
            passed=True,
        ))
    return Outcome(_finding(
        SEMANTIC,
        "Missing canonical URL",
        "Duplicate content issues may occur",
        Priority.IMPORTANT,
        "Add a canonical link tag",
        code_example='<link rel="canonical" href="https://example.com/page">',
    ), {SEMANTIC: -15})


def _json_ld_outcome(count: int) -> Outcome:
    if count:
        return Outcome(_finding(
            SEMANTIC,
            f"JSON-LD structured data found ({count} block(s))",
            "Rich search results and AI understanding improved",
            Priority.OPTIONAL,
            passed=True,
        ))
    return Outcome(_finding(
        SEMANTIC,
        "No JSON-LD structured data",
        "Missing opportunity for rich search results",
        Priority.OPTIONAL,
        "Add JSON-LD markup for your content type",
        code_example=(
            '<script type="application/ld+json">\n'
            "{\n"
            '  "@context": "https://schema.org",\n'
            '  "@type": "WebPage",\n'
            '  "name": "Page Title",\n'
            '  "description": "Page description"\n'
            "}\n"
            "</script>"
        ),
    ), {SEMANTIC: -10})


def check_social_card(doc: HtmlDocument, url: str, probes: ProbeClient, ttfb_ms: Optional[int] = None) -> CheckResult:
    image_outcomes, image_size = _og_image_outcomes(doc, url, probes)
    json_ld_count = len(doc.json_ld_scripts())

    outcomes = [
        title_outcome(doc, Category.SOCIAL_CARD, META, subcategory=META),
        description_outcome(doc, Category.SOCIAL_CARD, META, subcategory=META),
        _og_tag_outcome(
            doc, "og:title", -20,
            "Facebook/LinkedIn will fall back to <title> or may not display properly",
            "Social platforms will display your custom title",
        ),
        _og_tag_outcome(
            doc, "og:description", -15,
            "Social platforms may not show a description or use auto-generated text",
            "Social platforms will display your custom description",
        ),
        *image_outcomes,
        _twitter_outcome(doc),
        ttfb_outcome(ttfb_ms),
        _canonical_outcome(doc),
        _json_ld_outcome(json_ld_count),
    ]

    return multi_dimension(Category.SOCIAL_CARD.value, outcomes, WEIGHTS, metadata={
        "has_title": bool(doc.title()),
        "has_description": bool(doc.meta(name="description")),
        "has_og_title": bool(doc.meta(property="og:title")),
        "has_og_description": bool(doc.meta(property="og:description")),
        "has_og_image": bool(doc.meta(property="og:image")),
        "has_twitter_card": bool(doc.meta(name="twitter:card")),
        "has_canonical": bool(doc.link_href("canonical")),
        "has_json_ld": json_ld_count > 0,
        "ttfb_ms": ttfb_ms,
        "og_image_dimensions": image_size.to_dict() if image_size else None,
    })
