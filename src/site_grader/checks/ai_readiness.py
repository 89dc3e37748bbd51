"""AI readiness: can LLMs and AI agents read, understand and reach the site?

Four weighted sub-scores:

- content accessibility (30%): how much content exists without JavaScript
- structured data (25%): JSON-LD, Open Graph, Twitter Card
- MCP compliance (20%): a ``/.well-known/mcp`` discovery document
- crawlability (25%): ``/llms.txt`` and AI crawler rules in ``/robots.txt``
"""

import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from ..document import HtmlDocument
from ..models import Category, CheckResult, Finding, Outcome, Priority
from ..probes import ProbeClient, ProbeResult, ProbeStatus
from ..robots import parse_robots
from ..scoring import multi_dimension, round_half_up
from ..urls import base_url


CONTENT = "content-accessibility"
STRUCTURED = "structured-data"
MCP = "mcp-compliance"
CRAWL = "crawlability"

WEIGHTS = {CONTENT: 30, STRUCTURED: 25, MCP: 20, CRAWL: 25}

AI_CRAWLERS = ["GPTBot", "ChatGPT-User", "Claude-Web", "Anthropic", "PerplexityBot", "Google-Extended"]
IDENTITY_TYPES = {"Organization", "LocalBusiness", "WebSite"}
OG_REQUIRED = ("og:title", "og:description", "og:image", "og:type")

SSR_THRESHOLD = 80
CSR_THRESHOLD = 50
THIN_CONTENT = 500
NOSCRIPT_THRESHOLD = 1000


def _finding(subcategory: str, issue: str, impact: str, priority: Priority,
             how_to_fix: str = "", code_example: Optional[str] = None, passed: bool = False) -> Finding:
    return Finding(
        category=Category.AI_READINESS,
        subcategory=subcategory,
        issue=issue,
        impact=impact,
        priority=priority,
        how_to_fix=how_to_fix,
        code_example=code_example,
        passed=passed,
    )


# --- content accessibility -------------------------------------------------

def extraction_rate(raw_length: int, rendered_length: int) -> int:
    """Share of rendered text already present in the raw HTML, in percent."""
    if rendered_length <= 0:
        return 100
    return min(100, round_half_up(raw_length / rendered_length * 100))


def content_outcomes(raw: HtmlDocument, rendered: Optional[HtmlDocument]) -> tuple[list[Outcome], bool, int]:
    raw_length = len(raw.body_text())
    outcomes: list[Outcome] = []
    is_ssr = True
    rate = 100

    if rendered is not None:
        rate = extraction_rate(raw_length, len(rendered.body_text()))
        if rate < CSR_THRESHOLD:
            is_ssr = False
            outcomes.append(Outcome(_finding(
                CONTENT,
                f"Only {rate}% of content visible without JavaScript",
                "AI crawlers and LLMs cannot access JavaScript-rendered content, limiting discoverability",
                Priority.CRITICAL,
                "Implement Server-Side Rendering (SSR) or Static Site Generation (SSG) for critical content",
                code_example=(
                    "// Next.js example with SSR\n"
                    "export async function getServerSideProps() {\n"
                    "  const data = await fetchData();\n"
                    "  return { props: { data } };\n"
                    "}"
                ),
            ), {CONTENT: -40}))
        elif rate < SSR_THRESHOLD:
            is_ssr = False
            outcomes.append(Outcome(_finding(
                CONTENT,
                f"{rate}% of content accessible without JavaScript (needs improvement)",
                "Some content may not be indexed by AI crawlers",
                Priority.IMPORTANT,
                "Move critical content to server-rendered HTML or use progressive enhancement",
            ), {CONTENT: -20}))
        else:
            outcomes.append(Outcome(_finding(
                CONTENT,
                "Content is accessible without JavaScript (SSR/SSG detected)",
                "AI crawlers can fully access your content",
                Priority.OPTIONAL,
                passed=True,
            )))
    elif raw_length < THIN_CONTENT:
        is_ssr = False
        outcomes.append(Outcome(_finding(
            CONTENT,
            "Very little content in initial HTML (likely client-side rendered)",
            "AI crawlers may not be able to extract meaningful content",
            Priority.CRITICAL,
            "Implement SSR or include critical content in initial HTML response",
        ), {CONTENT: -35}))
    else:
        outcomes.append(Outcome(_finding(
            CONTENT,
            f"Initial HTML carries {raw_length} characters of content",
            "AI crawlers can extract content without running JavaScript",
            Priority.OPTIONAL,
            passed=True,
        )))

    noscript = " ".join(raw.text(n) for n in raw.select_all("noscript")).strip()
    if not noscript and raw_length < NOSCRIPT_THRESHOLD:
        outcomes.append(Outcome(_finding(
            CONTENT,
            "No <noscript> fallback content",
            "Users and crawlers without JavaScript see nothing useful",
            Priority.IMPORTANT,
            "Add <noscript> tag with meaningful fallback content",
            code_example=(
                "<noscript>\n"
                "  <p>This site requires JavaScript. Please enable JavaScript or visit our sitemap.</p>\n"
                '  <a href="/sitemap">View Sitemap</a>\n'
                "</noscript>"
            ),
        ), {CONTENT: -10}))

    return outcomes, is_ssr, rate


# --- structured data -------------------------------------------------------

def schema_types(data: Any) -> set[str]:
    """Collect @type values from a JSON-LD document, lists and @graph included."""
    types: set[str] = set()
    if isinstance(data, list):
        for item in data:
            types |= schema_types(item)
    elif isinstance(data, dict):
        type_val = data.get("@type")
        if isinstance(type_val, list):
            types.update(t for t in type_val if isinstance(t, str))
        elif isinstance(type_val, str):
            types.add(type_val)
        types |= schema_types(data.get("@graph", []))
    return types


def structured_outcomes(doc: HtmlDocument, url: str) -> tuple[list[Outcome], int]:
    outcomes: list[Outcome] = []
    blocks = doc.json_ld_scripts()

    if not blocks:
        outcomes.append(Outcome(_finding(
            STRUCTURED,
            "No JSON-LD structured data found",
            "AI systems cannot understand your content structure, reducing discoverability",
            Priority.CRITICAL,
            "Add JSON-LD structured data using schema.org vocabulary",
            code_example=(
                '<script type="application/ld+json">\n'
                "{\n"
                '  "@context": "https://schema.org",\n'
                '  "@type": "Organization",\n'
                '  "name": "Your Company",\n'
                f'  "url": "{url}",\n'
                '  "description": "Your company description"\n'
                "}\n"
                "</script>"
            ),
        ), {STRUCTURED: -30}))
    else:
        valid = 0
        types: set[str] = set()
        for block in blocks:
            try:
                data = json.loads(block)
            except ValueError:
                outcomes.append(Outcome(_finding(
                    STRUCTURED,
                    "Invalid JSON-LD syntax detected",
                    "Malformed structured data is ignored by AI systems",
                    Priority.CRITICAL,
                    "Validate your JSON-LD at https://validator.schema.org/",
                ), {STRUCTURED: -15}))
                continue
            valid += 1
            types |= schema_types(data)

        if valid:
            outcomes.append(Outcome(_finding(
                STRUCTURED,
                f"{valid} valid JSON-LD schema(s) found",
                "Structured data helps AI understand your content",
                Priority.OPTIONAL,
                passed=True,
            )))
            if not types & IDENTITY_TYPES:
                outcomes.append(Outcome(_finding(
                    STRUCTURED,
                    "Missing Organization or WebSite schema",
                    "AI systems may not properly identify your brand/organization",
                    Priority.IMPORTANT,
                    "Add Organization schema with name, logo, and contact info",
                ), {STRUCTURED: -10}))

    missing_og = [tag for tag in OG_REQUIRED if not doc.meta(property=tag)]
    present_og = len(OG_REQUIRED) - len(missing_og)
    if present_og == 0:
        outcomes.append(Outcome(_finding(
            STRUCTURED,
            "No Open Graph meta tags found",
            "Content previews in AI chat interfaces and social media will be poor",
            Priority.IMPORTANT,
            "Add Open Graph meta tags for title, description, image, and type",
            code_example=(
                '<meta property="og:title" content="Your Page Title">\n'
                '<meta property="og:description" content="Your page description">\n'
                '<meta property="og:image" content="https://example.com/image.jpg">\n'
                '<meta property="og:type" content="website">'
            ),
        ), {STRUCTURED: -20}))
    elif missing_og:
        outcomes.append(Outcome(_finding(
            STRUCTURED,
            f"Only {present_og}/{len(OG_REQUIRED)} required Open Graph tags present",
            "Incomplete metadata may result in poor content previews",
            Priority.IMPORTANT,
            f"Add missing OG tags: {', '.join(missing_og)}",
        ), {STRUCTURED: -10}))
    else:
        outcomes.append(Outcome(_finding(
            STRUCTURED,
            "Complete Open Graph metadata present",
            "Content will display well in AI interfaces and social shares",
            Priority.OPTIONAL,
            passed=True,
        )))

    if not doc.meta(name="twitter:card"):
        outcomes.append(Outcome(_finding(
            STRUCTURED,
            "Missing Twitter Card meta tags",
            "Content previews on Twitter/X will be limited",
            Priority.OPTIONAL,
            "Add twitter:card meta tag (summary_large_image recommended)",
        ), {STRUCTURED: -5}))

    return outcomes, len(blocks)


# --- MCP and crawlability --------------------------------------------------

def mcp_outcome(result: ProbeResult) -> Outcome:
    if result.status is ProbeStatus.PRESENT:
        return Outcome(_finding(
            MCP,
            "MCP server endpoint detected and valid",
            "AI agents can discover and use your MCP tools",
            Priority.OPTIONAL,
            passed=True,
        ), {MCP: 10})
    if result.status is ProbeStatus.INVALID and result.reason == "malformed":
        return Outcome(_finding(
            MCP,
            "MCP endpoint returns invalid JSON",
            "AI agents cannot parse your MCP configuration",
            Priority.IMPORTANT,
            "Return valid JSON from /.well-known/mcp endpoint",
        ), {MCP: -10})
    if result.status is ProbeStatus.INVALID:
        return Outcome(_finding(
            MCP,
            "MCP endpoint found but response is incomplete",
            "AI agents may not properly discover your tools",
            Priority.IMPORTANT,
            "Ensure MCP endpoint returns name, version, and tools array",
        ))
    return Outcome(_finding(
        MCP,
        "No MCP server endpoint detected",
        "AI agents cannot interact with your site via Model Context Protocol",
        Priority.OPTIONAL,
        "Consider implementing an MCP server for AI agent integration",
        code_example=(
            "// MCP discovery endpoint at /.well-known/mcp\n"
            "{\n"
            '  "name": "your-service",\n'
            '  "version": "1.0.0",\n'
            '  "tools": [{ "name": "your_tool", "description": "..." }]\n'
            "}"
        ),
    ))


def llms_txt_outcome(result: ProbeResult) -> Outcome:
    if result.status is ProbeStatus.PRESENT:
        return Outcome(_finding(
            "llms-txt",
            "llms.txt file present with content",
            "LLMs can understand your site structure and services",
            Priority.OPTIONAL,
            passed=True,
        ), {CRAWL: 10})
    if result.status is ProbeStatus.INVALID:
        return Outcome(_finding(
            "llms-txt",
            "llms.txt file is too short (< 100 characters)",
            "Limited information for AI crawlers",
            Priority.IMPORTANT,
            "Add comprehensive content to llms.txt describing your services",
        ))
    return Outcome(_finding(
        "llms-txt",
        "No llms.txt file found",
        "LLMs have no dedicated documentation about your site",
        Priority.IMPORTANT,
        "Create /llms.txt with a summary of your site for AI crawlers",
        code_example=(
            "# Your Company Name\n\n"
            "> Brief description of your company\n\n"
            "## Services\n"
            "- Service 1: Description\n"
            "- Service 2: Description\n\n"
            "## Contact\n"
            "website: https://yoursite.com\n"
            "email: hello@yoursite.com"
        ),
    ), {CRAWL: -15})


def robots_outcomes(result: ProbeResult) -> list[Outcome]:
    if result.status is ProbeStatus.ERROR:
        return [Outcome(_finding(
            CRAWL,
            "Could not fetch robots.txt",
            "Unable to verify crawler accessibility",
            Priority.OPTIONAL,
            "Ensure robots.txt is accessible",
        ))]
    if not result.found:
        return [Outcome(_finding(
            CRAWL,
            "No robots.txt file found",
            "Crawlers have no guidance on how to access your site",
            Priority.IMPORTANT,
            "Create a robots.txt file in your site root",
        ), {CRAWL: -10})]

    robots = parse_robots(result.data or "")
    outcomes: list[Outcome] = []
    blocked = [c for c in AI_CRAWLERS if robots.blocks(c)]
    if blocked:
        outcomes.append(Outcome(_finding(
            CRAWL,
            f"AI crawlers blocked in robots.txt: {', '.join(blocked)}",
            "These AI systems cannot index your content",
            Priority.IMPORTANT,
            "Review robots.txt and consider allowing AI crawlers if desired",
        ), {CRAWL: -20}))
    elif robots.blocks_everyone:
        outcomes.append(Outcome(_finding(
            CRAWL,
            "robots.txt may be blocking all crawlers",
            "AI systems may not be able to access your content",
            Priority.IMPORTANT,
            "Review your robots.txt rules to ensure desired pages are accessible",
        ), {CRAWL: -15}))
    else:
        allowed = [c for c in AI_CRAWLERS if robots.explicitly_allows(c)]
        if allowed:
            outcomes.append(Outcome(_finding(
                CRAWL,
                f"AI crawlers explicitly allowed: {', '.join(allowed)}",
                "Good! These AI systems can freely index your content",
                Priority.OPTIONAL,
                passed=True,
            )))
        else:
            outcomes.append(Outcome(_finding(
                CRAWL,
                "robots.txt allows general crawling",
                "AI crawlers can access your content",
                Priority.OPTIONAL,
                passed=True,
            )))

    if robots.sitemaps:
        outcomes.append(Outcome(_finding(
            CRAWL,
            "Sitemap reference in robots.txt",
            "Crawlers can discover all your pages efficiently",
            Priority.OPTIONAL,
            passed=True,
        )))
    else:
        outcomes.append(Outcome(_finding(
            CRAWL,
            "No sitemap reference in robots.txt",
            "Crawlers may not discover all pages",
            Priority.OPTIONAL,
            "Add Sitemap: https://yoursite.com/sitemap.xml to robots.txt",
        ), {CRAWL: -5}))
    return outcomes


def _probe_site(probes: ProbeClient, base: str, parallel: bool) -> tuple[ProbeResult, ProbeResult, ProbeResult]:
    if not parallel:
        return probes.mcp_manifest(base), probes.llms_txt(base), probes.robots_txt(base)
    with ThreadPoolExecutor(max_workers=3) as executor:
        mcp = executor.submit(probes.mcp_manifest, base)
        llms = executor.submit(probes.llms_txt, base)
        robots = executor.submit(probes.robots_txt, base)
        return mcp.result(), llms.result(), robots.result()


def check_ai_readiness(
    url: str,
    raw: HtmlDocument,
    rendered: Optional[HtmlDocument],
    probes: ProbeClient,
    parallel: bool = True,
) -> CheckResult:
    """Score how well AI crawlers and agents can use the page."""
    content, is_ssr, rate = content_outcomes(raw, rendered)
    structured, json_ld_count = structured_outcomes(raw, url)

    mcp_result, llms_result, robots_result = _probe_site(probes, base_url(url), parallel)
    outcomes = [
        *content,
        *structured,
        mcp_outcome(mcp_result),
        llms_txt_outcome(llms_result),
        *robots_outcomes(robots_result),
    ]

    return multi_dimension(Category.AI_READINESS.value, outcomes, WEIGHTS, metadata={
        "is_ssr": is_ssr,
        "has_llms_txt": llms_result.found,
        "has_mcp_endpoint": mcp_result.found,
        "json_ld_count": json_ld_count,
        "content_extraction_rate": rate,
    })
