"""HTTPS and security header checks."""

from typing import Mapping, Optional
from urllib.parse import urlparse

from ..models import Category, CheckResult, Finding, Outcome, Priority
from ..scoring import single_dimension


SECURITY = Category.SECURITY.value


# (header, penalty, priority, impact, fix)
HEADER_RULES = [
    (
        "content-security-policy", -15, Priority.IMPORTANT,
        "CSP helps prevent XSS attacks and data injection",
        "Add a Content-Security-Policy header to your server configuration. Start with: Content-Security-Policy: default-src 'self'",
    ),
    (
        "x-frame-options", -10, Priority.IMPORTANT,
        "Your site could be embedded in iframes, enabling clickjacking attacks",
        "Add header: X-Frame-Options: DENY (or SAMEORIGIN if you need iframes from your own domain)",
    ),
    (
        "x-content-type-options", -10, Priority.IMPORTANT,
        "Browsers might MIME-sniff content, leading to security issues",
        "Add header: X-Content-Type-Options: nosniff",
    ),
    (
        "strict-transport-security", -10, Priority.IMPORTANT,
        "Users could be downgraded to HTTP connections",
        "Add header: Strict-Transport-Security: max-age=31536000; includeSubDomains",
    ),
    (
        "x-xss-protection", -5, Priority.OPTIONAL,
        "Older browsers will not block reflected XSS attempts",
        "Add header: X-XSS-Protection: 1; mode=block",
    ),
    (
        "referrer-policy", -5, Priority.OPTIONAL,
        "Full URLs may leak to third parties through the Referer header",
        "Add header: Referrer-Policy: strict-origin-when-cross-origin",
    ),
]

DISPLAY_NAMES = {
    "content-security-policy": "Content-Security-Policy",
    "x-frame-options": "X-Frame-Options",
    "x-content-type-options": "X-Content-Type-Options",
    "strict-transport-security": "Strict-Transport-Security",
    "x-xss-protection": "X-XSS-Protection",
    "referrer-policy": "Referrer-Policy",
}


def normalize_headers(headers: Optional[Mapping[str, str]]) -> dict[str, str]:
    """Lower-case header names so lookups are case-insensitive."""
    return {k.lower(): v for k, v in (headers or {}).items()}


def _header_ok(name: str, value: Optional[str]) -> bool:
    if not value:
        return False
    if name == "x-content-type-options":
        return value.strip().lower() == "nosniff"
    return True


def check_security(url: str, headers: Optional[Mapping[str, str]]) -> CheckResult:
    """Check HTTPS and the standard set of security response headers."""
    headers = normalize_headers(headers)
    is_https = urlparse(url).scheme == "https"
    outcomes: list[Outcome] = []

    if is_https:
        outcomes.append(Outcome(Finding(
            category=Category.SECURITY,
            subcategory="https",
            issue="Site uses HTTPS",
            impact="Data is encrypted in transit",
            priority=Priority.OPTIONAL,
            passed=True,
        )))
    else:
        outcomes.append(Outcome(Finding(
            category=Category.SECURITY,
            subcategory="https",
            issue="Site not using HTTPS",
            impact="HTTPS encrypts data and is required for modern SEO",
            priority=Priority.CRITICAL,
            how_to_fix="Install an SSL certificate and redirect all HTTP traffic to HTTPS",
        ), {SECURITY: -30}))

    for name, penalty, priority, impact, fix in HEADER_RULES:
        # HSTS means nothing over plain HTTP
        if name == "strict-transport-security" and not is_https:
            continue
        display = DISPLAY_NAMES[name]
        if _header_ok(name, headers.get(name)):
            outcomes.append(Outcome(Finding(
                category=Category.SECURITY,
                subcategory="headers",
                issue=f"{display} header present",
                impact=f"{display} is configured",
                priority=Priority.OPTIONAL,
                passed=True,
            )))
        else:
            outcomes.append(Outcome(Finding(
                category=Category.SECURITY,
                subcategory="headers",
                issue=f"Missing {display} header",
                impact=impact,
                priority=priority,
                how_to_fix=fix,
            ), {SECURITY: penalty}))

    return single_dimension(SECURITY, outcomes, metadata={"https": is_https})
