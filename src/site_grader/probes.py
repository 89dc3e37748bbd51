"""Best-effort fetchers for ancillary site resources.

Every probe resolves to a :class:`ProbeResult`; network failures, timeouts
and bad responses never propagate as exceptions.
"""

import json
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import dns.exception
import dns.resolver
import httpx

from .config import Settings
from .imaging import ImageSize, sniff_dimensions


logger = logging.getLogger(__name__)

LLMS_TXT_MIN_LENGTH = 100


class ProbeStatus(Enum):
    PRESENT = "present"
    INVALID = "invalid"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe.

    ``data`` holds the decoded body for PRESENT results (and for INVALID ones
    where it could be decoded). ``reason`` explains INVALID and ERROR results.
    """
    status: ProbeStatus
    url: str
    status_code: Optional[int] = None
    data: Any = None
    reason: Optional[str] = None

    @property
    def found(self) -> bool:
        """True when the resource exists, valid or not."""
        return self.status in (ProbeStatus.PRESENT, ProbeStatus.INVALID)


def classify_llms_txt(result: ProbeResult) -> ProbeResult:
    if result.status is not ProbeStatus.PRESENT:
        return result
    if len(result.data) < LLMS_TXT_MIN_LENGTH:
        return ProbeResult(ProbeStatus.INVALID, result.url, result.status_code, result.data, "short")
    return result


def classify_mcp_manifest(result: ProbeResult) -> ProbeResult:
    if result.status is not ProbeStatus.PRESENT:
        return result
    try:
        manifest = json.loads(result.data)
    except ValueError:
        return ProbeResult(ProbeStatus.INVALID, result.url, result.status_code, None, "malformed")
    if isinstance(manifest, dict) and manifest.get("name") and isinstance(manifest.get("tools"), list):
        return ProbeResult(ProbeStatus.PRESENT, result.url, result.status_code, manifest)
    return ProbeResult(ProbeStatus.INVALID, result.url, result.status_code, manifest, "incomplete")


class ProbeClient:
    """HTTP probes for one analysis.

    Responses are memoized per URL for the lifetime of the client so that
    several analyzers asking for the same resource see the same answer.
    """

    def __init__(self, client: Optional[httpx.Client] = None, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self._owns_client = client is None
        self.client = client or httpx.Client(
            headers={"User-Agent": self.settings.user_agent},
            follow_redirects=True,
        )
        self._memo: dict[str, ProbeResult] = {}
        self._lock = threading.Lock()
        self._key_locks: dict[str, threading.Lock] = {}

    def __enter__(self) -> "ProbeClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def _memoized(self, key: str, fetch: Callable[[], ProbeResult]) -> ProbeResult:
        # one lock per resource: concurrent callers wait for the first fetch
        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        with key_lock:
            if key not in self._memo:
                self._memo[key] = fetch()
            return self._memo[key]

    def get_text(self, url: str, accept: Optional[str] = None) -> ProbeResult:
        """GET a text resource; 200 is PRESENT, anything else ABSENT."""
        def fetch() -> ProbeResult:
            headers = {"Accept": accept} if accept else None
            try:
                resp = self.client.get(url, headers=headers, timeout=self.settings.text_probe_timeout)
            except httpx.TimeoutException:
                logger.warning("Probe timed out: %s", url)
                return ProbeResult(ProbeStatus.ERROR, url, reason="timeout")
            except httpx.HTTPError as e:
                logger.warning("Probe failed: %s (%s)", url, e)
                return ProbeResult(ProbeStatus.ERROR, url, reason=str(e) or type(e).__name__)
            except (httpx.InvalidURL, ValueError) as e:
                logger.warning("Probe skipped, invalid URL: %r (%s)", url, e)
                return ProbeResult(ProbeStatus.ERROR, url, reason="invalid url")

            if resp.status_code != 200:
                logger.debug("Probe %s -> HTTP %d", url, resp.status_code)
                return ProbeResult(ProbeStatus.ABSENT, url, resp.status_code)
            logger.debug("Probe %s -> present (%d bytes)", url, len(resp.content))
            return ProbeResult(ProbeStatus.PRESENT, url, resp.status_code, resp.text)

        return self._memoized(f"GET {url} {accept or ''}", fetch)

    def robots_txt(self, base: str) -> ProbeResult:
        return self.get_text(f"{base}/robots.txt")

    def sitemap_xml(self, base: str) -> ProbeResult:
        return self.get_text(f"{base}/sitemap.xml")

    def llms_txt(self, base: str) -> ProbeResult:
        return classify_llms_txt(self.get_text(f"{base}/llms.txt"))

    def mcp_manifest(self, base: str) -> ProbeResult:
        return classify_mcp_manifest(self.get_text(f"{base}/.well-known/mcp", accept="application/json"))

    def image_bytes(self, url: str) -> ProbeResult:
        """HEAD the image, then stream up to ``max_image_bytes`` of it."""
        def fetch() -> ProbeResult:
            limit = self.settings.max_image_bytes
            try:
                head = self.client.head(url, timeout=self.settings.image_head_timeout)
                if head.status_code != 200:
                    return ProbeResult(ProbeStatus.ABSENT, url, head.status_code)
                with self.client.stream("GET", url, timeout=self.settings.image_get_timeout) as resp:
                    if resp.status_code != 200:
                        return ProbeResult(ProbeStatus.ABSENT, url, resp.status_code)
                    chunks = bytearray()
                    for chunk in resp.iter_bytes():
                        chunks.extend(chunk)
                        if len(chunks) >= limit:
                            break
            except httpx.TimeoutException:
                logger.warning("Image probe timed out: %s", url)
                return ProbeResult(ProbeStatus.ERROR, url, reason="timeout")
            except httpx.HTTPError as e:
                logger.warning("Image probe failed: %s (%s)", url, e)
                return ProbeResult(ProbeStatus.ERROR, url, reason=str(e) or type(e).__name__)
            except (httpx.InvalidURL, ValueError) as e:
                logger.warning("Image probe skipped, invalid URL: %r (%s)", url, e)
                return ProbeResult(ProbeStatus.ERROR, url, reason="invalid url")
            return ProbeResult(ProbeStatus.PRESENT, url, 200, bytes(chunks[:limit]))

        return self._memoized(f"IMAGE {url}", fetch)

    def image_dimensions(self, url: str) -> Optional[ImageSize]:
        result = self.image_bytes(url)
        if result.status is not ProbeStatus.PRESENT:
            return None
        size = sniff_dimensions(result.data)
        logger.debug("Image %s -> %s", url, size)
        return size


class DnsProbe:
    """TXT and MX lookups through dnspython."""

    def __init__(self, resolver: Optional[dns.resolver.Resolver] = None, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.resolver = resolver or dns.resolver.Resolver()

    def lookup(self, name: str, rdtype: str) -> ProbeResult:
        try:
            answers = self.resolver.resolve(name, rdtype, lifetime=self.settings.dns_lifetime)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            logger.debug("DNS %s %s -> absent", rdtype, name)
            return ProbeResult(ProbeStatus.ABSENT, name)
        except dns.exception.Timeout:
            logger.warning("DNS %s %s timed out", rdtype, name)
            return ProbeResult(ProbeStatus.ERROR, name, reason="timeout")
        except dns.exception.DNSException as e:
            logger.warning("DNS %s %s failed: %s", rdtype, name, e)
            return ProbeResult(ProbeStatus.ERROR, name, reason=str(e) or type(e).__name__)

        if rdtype == "TXT":
            records = [
                "".join(s.decode("utf-8", "replace") for s in answer.strings)
                for answer in answers
            ]
        elif rdtype == "MX":
            records = [str(answer.exchange).rstrip(".") for answer in answers]
        else:
            records = [str(answer) for answer in answers]
        if not records:
            return ProbeResult(ProbeStatus.ABSENT, name)
        return ProbeResult(ProbeStatus.PRESENT, name, data=records)

    def txt(self, name: str) -> ProbeResult:
        return self.lookup(name, "TXT")

    def mx(self, name: str) -> ProbeResult:
        return self.lookup(name, "MX")
