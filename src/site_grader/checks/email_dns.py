"""Email authentication DNS checks (SPF, MX, DMARC, DKIM)."""

from ..models import Category, CheckResult, Finding, Outcome, Priority
from ..probes import DnsProbe, ProbeResult, ProbeStatus
from ..scoring import single_dimension
from ..urls import site_domain


EMAIL = Category.EMAIL.value

DKIM_SELECTORS = ("default", "google", "selector1", "selector2", "k1", "dkim", "mail")


def parse_tags(record: str) -> dict[str, str]:
    """Split a ``k=v; k=v`` DNS record into a lower-cased tag map."""
    tags = {}
    for part in record.split(";"):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        tags[key.strip().lower()] = value.strip()
    return tags


def _unverified(subcategory: str, name: str, result: ProbeResult) -> Outcome:
    return Outcome(Finding(
        category=Category.EMAIL,
        subcategory=subcategory,
        issue=f"Could not verify {name} record ({result.reason})",
        impact="The DNS lookup failed, so this record could not be checked",
        priority=Priority.OPTIONAL,
        how_to_fix="Check that your domain's nameservers respond, then re-run the analysis",
    ))


def _spf_outcome(result: ProbeResult) -> Outcome:
    if result.status is ProbeStatus.ERROR:
        return _unverified("spf", "SPF", result)
    records = [r for r in (result.data or []) if r.lower().startswith("v=spf1")]
    if not records:
        return Outcome(Finding(
            category=Category.EMAIL,
            subcategory="spf",
            issue="Missing SPF record",
            impact="Anyone can send mail that claims to come from your domain",
            priority=Priority.CRITICAL,
            how_to_fix="Publish a TXT record listing the servers allowed to send your mail",
            code_example="example.com. TXT \"v=spf1 include:_spf.google.com ~all\"",
        ), {EMAIL: -25})
    return Outcome(Finding(
        category=Category.EMAIL,
        subcategory="spf",
        issue="SPF record present",
        impact="Receivers can verify which servers send mail for your domain",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def _mx_outcome(result: ProbeResult) -> Outcome:
    if result.status is ProbeStatus.ERROR:
        return _unverified("mx", "MX", result)
    if result.status is not ProbeStatus.PRESENT:
        return Outcome(Finding(
            category=Category.EMAIL,
            subcategory="mx",
            issue="Missing MX records",
            impact="Your domain cannot receive email, and some receivers distrust mail from it",
            priority=Priority.IMPORTANT,
            how_to_fix="Add MX records pointing at your mail provider",
        ), {EMAIL: -20})
    return Outcome(Finding(
        category=Category.EMAIL,
        subcategory="mx",
        issue=f"MX records present ({', '.join(result.data)})",
        impact="Your domain can receive email",
        priority=Priority.OPTIONAL,
        passed=True,
    ))


def _dmarc_outcomes(result: ProbeResult, domain: str) -> list[Outcome]:
    if result.status is ProbeStatus.ERROR:
        return [_unverified("dmarc", "DMARC", result)]
    records = [r for r in (result.data or []) if "v=dmarc1" in r.lower()]
    if not records:
        return [Outcome(Finding(
            category=Category.EMAIL,
            subcategory="dmarc",
            issue="Missing DMARC record",
            impact="Receivers have no policy for mail that fails SPF or DKIM",
            priority=Priority.IMPORTANT,
            how_to_fix=f"Publish a TXT record at _dmarc.{domain}",
            code_example=f"_dmarc.{domain}. TXT \"v=DMARC1; p=quarantine; rua=mailto:dmarc@{domain}\"",
        ), {EMAIL: -20})]

    outcomes = [Outcome(Finding(
        category=Category.EMAIL,
        subcategory="dmarc",
        issue="DMARC record present",
        impact="Receivers know how to treat unauthenticated mail",
        priority=Priority.OPTIONAL,
        passed=True,
    ))]
    policy = parse_tags(records[0]).get("p", "").lower()
    if policy == "none":
        outcomes.append(Outcome(Finding(
            category=Category.EMAIL,
            subcategory="dmarc",
            issue='DMARC policy is "none"',
            impact="Spoofed mail is reported but still delivered",
            priority=Priority.IMPORTANT,
            how_to_fix="Move the DMARC policy to p=quarantine or p=reject once reports look clean",
        ), {EMAIL: -10}))
    return outcomes


def _dkim_outcome(dns_probe: DnsProbe, domain: str) -> Outcome:
    errors = 0
    for selector in DKIM_SELECTORS:
        result = dns_probe.txt(f"{selector}._domainkey.{domain}")
        if result.status is ProbeStatus.ERROR:
            errors += 1
            continue
        if result.status is ProbeStatus.PRESENT and any("p=" in r for r in result.data):
            return Outcome(Finding(
                category=Category.EMAIL,
                subcategory="dkim",
                issue=f"DKIM record found (selector: {selector})",
                impact="Receivers can verify your mail was not altered in transit",
                priority=Priority.OPTIONAL,
                passed=True,
            ))
    if errors == len(DKIM_SELECTORS):
        return _unverified("dkim", "DKIM", ProbeResult(ProbeStatus.ERROR, domain, reason="lookups failed"))
    return Outcome(Finding(
        category=Category.EMAIL,
        subcategory="dkim",
        issue="Missing DKIM record",
        impact="Mail from your domain cannot be cryptographically verified",
        priority=Priority.OPTIONAL,
        how_to_fix="Enable DKIM signing with your mail provider and publish its public key",
    ), {EMAIL: -10})


def check_email_dns(url: str, dns_probe: DnsProbe) -> CheckResult:
    """Check the email authentication records of the site's domain.

    Only common DKIM selectors are tried, so a custom selector reads as
    missing.
    """
    domain = site_domain(url)
    outcomes = [
        _spf_outcome(dns_probe.txt(domain)),
        _mx_outcome(dns_probe.mx(domain)),
        *_dmarc_outcomes(dns_probe.txt(f"_dmarc.{domain}"), domain),
        _dkim_outcome(dns_probe, domain),
    ]
    return single_dimension(EMAIL, outcomes, metadata={"domain": domain})
