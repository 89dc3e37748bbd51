"""Main auditor that runs all analyzers over a page."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

import httpx

from .checks import (
    check_accessibility,
    check_ai_readiness,
    check_email_dns,
    check_keywords,
    check_mobile,
    check_performance,
    check_security,
    check_seo,
    check_social_card,
)
from .config import Settings
from .document import HtmlDocument
from .exceptions import FetchError
from .models import AnalysisResult, Category, CheckResult
from .probes import DnsProbe, ProbeClient
from .scoring import grade_letter, overall_score
from .urls import normalize_url, validate_url


logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

# Invocation order; findings are reported in this order.
ANALYZERS = [c.value for c in Category]


@dataclass
class PageBundle:
    """Everything the analyzers need about one fetched page."""
    url: str
    raw_html: str
    rendered_html: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)
    ttfb_ms: Optional[int] = None
    lighthouse_performance: Optional[int] = None
    redirect_count: int = 0


def _select(only: Optional[Iterable[str]]) -> list[str]:
    if not only:
        return list(ANALYZERS)
    wanted = {name.strip().lower() for name in only}
    unknown = wanted - set(ANALYZERS)
    if unknown:
        raise ValueError(f"Unknown analyzer(s): {', '.join(sorted(unknown))}")
    return [name for name in ANALYZERS if name in wanted]


def _tasks(
    bundle: PageBundle,
    probes: ProbeClient,
    dns_probe: DnsProbe,
    parallel: bool,
) -> dict[str, Callable[[], CheckResult]]:
    raw = HtmlDocument(bundle.raw_html)
    rendered = HtmlDocument(bundle.rendered_html) if bundle.rendered_html is not None else None
    url = bundle.url
    return {
        Category.SEO.value: lambda: check_seo(raw, url, probes),
        Category.SECURITY.value: lambda: check_security(url, bundle.headers),
        Category.PERFORMANCE.value: lambda: check_performance(
            raw, url, bundle.headers, bundle.lighthouse_performance
        ),
        Category.KEYWORDS.value: lambda: check_keywords(raw),
        Category.ACCESSIBILITY.value: lambda: check_accessibility(raw),
        Category.MOBILE.value: lambda: check_mobile(raw, bundle.redirect_count),
        Category.EMAIL.value: lambda: check_email_dns(url, dns_probe),
        Category.AI_READINESS.value: lambda: check_ai_readiness(url, raw, rendered, probes, parallel),
        Category.SOCIAL_CARD.value: lambda: check_social_card(raw, url, probes, bundle.ttfb_ms),
    }


def analyze_page(
    bundle: PageBundle,
    probes: Optional[ProbeClient] = None,
    dns_probe: Optional[DnsProbe] = None,
    settings: Optional[Settings] = None,
    only: Optional[Iterable[str]] = None,
) -> AnalysisResult:
    """Run the analyzers over a fetched page.

    Analyzers run concurrently when ``settings.parallel`` is set, but results
    are always collected in invocation order so the output is deterministic.

    Args:
        bundle: The fetched page
        probes: HTTP probe client (a private one is created and closed if omitted)
        dns_probe: DNS lookups for the email analyzer
        settings: Timeouts and parallelism
        only: Restrict to these analyzer names

    Raises:
        InvalidURLError: if the bundle URL cannot be analyzed.
        ValueError: if ``only`` names an unknown analyzer.
    """
    validate_url(bundle.url)
    names = _select(only)
    settings = settings or Settings()
    owns_probes = probes is None
    probes = probes or ProbeClient(settings=settings)
    dns_probe = dns_probe or DnsProbe(settings=settings)

    try:
        tasks = _tasks(bundle, probes, dns_probe, settings.parallel)
        if settings.parallel:
            with ThreadPoolExecutor(max_workers=len(names)) as executor:
                futures = [executor.submit(tasks[name]) for name in names]
                checks = [future.result() for future in futures]
        else:
            checks = [tasks[name]() for name in names]
    finally:
        if owns_probes:
            probes.close()

    for check in checks:
        logger.debug("%s: %d (%d findings)", check.name, check.score, len(check.findings))

    result = AnalysisResult(url=bundle.url, checks=checks, ttfb_ms=bundle.ttfb_ms)
    result.overall_score = overall_score(checks)
    result.grade = grade_letter(result.overall_score)
    logger.info("Analyzed %s: %d (%s)", bundle.url, result.overall_score, result.grade)
    return result


def fetch_page(client: httpx.Client, url: str) -> PageBundle:
    """Fetch a page and package it for the analyzers.

    Raises:
        FetchError: on timeouts, HTTP errors and connection failures.
    """
    start = time.perf_counter()
    try:
        with client.stream("GET", url) as response:
            # headers have arrived once stream() returns
            ttfb_ms = int((time.perf_counter() - start) * 1000)
            response.raise_for_status()
            response.read()
    except httpx.TimeoutException as e:
        raise FetchError(f"Timeout after {client.timeout.read}s") from e
    except httpx.HTTPStatusError as e:
        raise FetchError(f"HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise FetchError(f"Request failed: {e}") from e

    return PageBundle(
        url=str(response.url),
        raw_html=response.text,
        headers=dict(response.headers),
        ttfb_ms=ttfb_ms,
        redirect_count=len(response.history),
    )


def audit_url(
    url: str,
    settings: Optional[Settings] = None,
    only: Optional[Iterable[str]] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> AnalysisResult:
    """Fetch a URL and run a complete analysis on it.

    Fetch failures are recorded in ``AnalysisResult.error`` rather than
    raised; an invalid URL still raises ``InvalidURLError``.
    """
    settings = settings or Settings()
    url = validate_url(normalize_url(url))
    start_time = time.time()

    with httpx.Client(
        headers={**DEFAULT_HEADERS, "User-Agent": settings.user_agent},
        timeout=settings.fetch_timeout,
        follow_redirects=True,
        transport=transport,
    ) as client:
        try:
            bundle = fetch_page(client, url)
        except FetchError as e:
            logger.warning("Could not fetch %s: %s", url, e)
            return AnalysisResult(url=url, error=str(e))
        fetch_time_ms = int((time.time() - start_time) * 1000)

        probes = ProbeClient(client=client, settings=settings)
        result = analyze_page(bundle, probes=probes, settings=settings, only=only)

    result.fetch_time_ms = fetch_time_ms
    return result
