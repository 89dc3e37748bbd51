"""URL normalization and validation."""

import ipaddress
from typing import Optional
from urllib.parse import urljoin, urlparse

from .exceptions import InvalidURLError


BLOCKED_HOSTS = {
    "localhost",
    "0.0.0.0",
    "metadata.google.internal",
    "169.254.169.254",
}


def normalize_url(url: str) -> str:
    """Ensure URL has a scheme."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url


def _is_private_address(host: str) -> bool:
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        address = address.ipv4_mapped
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_unspecified
        or address.is_reserved
    )


def validate_url(url: str) -> str:
    """Check that a URL can be analyzed and return it unchanged.

    Raises:
        InvalidURLError: for anything other than a public http(s) URL.
    """
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError as e:
        raise InvalidURLError(f"Invalid URL format: {url!r}") from e

    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError("Only HTTP and HTTPS URLs are allowed")
    if not host:
        raise InvalidURLError(f"URL has no host: {url!r}")

    host = host.lower().rstrip(".")
    if host in BLOCKED_HOSTS or host.endswith((".local", ".internal")):
        raise InvalidURLError(f"This URL cannot be analyzed: {host}")
    if _is_private_address(host):
        raise InvalidURLError(f"Private IP addresses cannot be analyzed: {host}")
    return url


def base_url(url: str) -> str:
    """Return scheme://host[:port] for a URL."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def site_domain(url: str) -> str:
    """Return the registrable-looking host of a URL, without ``www.``."""
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def is_absolute(url: str) -> bool:
    return url.startswith(("http://", "https://"))


def resolve(page_url: str, ref: str) -> Optional[str]:
    """Resolve a possibly relative reference against a page URL.

    Returns None when the reference cannot be parsed (e.g. an unclosed
    IPv6 bracket in page markup).
    """
    try:
        return urljoin(page_url, ref)
    except ValueError:
        return None


def host_of(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def path_of(ref: str) -> str:
    """Path component of a reference, empty when it cannot be parsed."""
    try:
        return urlparse(ref).path
    except ValueError:
        return ""
