import dns.exception

from site_grader.checks.email_dns import check_email_dns, parse_tags
from site_grader.models import Priority

URL = "https://www.example.com/contact"

GOOD_ZONE = {
    ("example.com", "TXT"): ["google-site-verification=abc", "v=spf1 include:_spf.google.com ~all"],
    ("example.com", "MX"): ["aspmx.l.google.com."],
    ("_dmarc.example.com", "TXT"): ["v=DMARC1; p=reject; rua=mailto:d@example.com"],
    ("google._domainkey.example.com", "TXT"): ["v=DKIM1; k=rsa; p=MIGfMA0"],
}


def failed(result):
    return [f for f in result.findings if not f.passed]


def test_parse_tags():
    assert parse_tags("v=DMARC1; P=none ; rua=mailto:x@y.z") == {"v": "DMARC1", "p": "none", "rua": "mailto:x@y.z"}


def test_fully_configured_domain(make_dns):
    result = check_email_dns(URL, make_dns(GOOD_ZONE))
    assert result.score == 100
    assert result.metadata == {"domain": "example.com"}
    dkim = result.findings[-1]
    assert dkim.issue == "DKIM record found (selector: google)"


def test_nothing_configured(make_dns):
    result = check_email_dns(URL, make_dns({}))
    # spf -25, mx -20, dmarc -20, dkim -10
    assert result.score == 25
    assert [f.subcategory for f in failed(result)] == ["spf", "mx", "dmarc", "dkim"]
    assert failed(result)[0].priority is Priority.CRITICAL


def test_dmarc_policy_none(make_dns):
    zone = dict(GOOD_ZONE)
    zone[("_dmarc.example.com", "TXT")] = ["v=DMARC1; p=none"]
    result = check_email_dns(URL, make_dns(zone))
    assert result.score == 90
    assert failed(result)[0].issue == 'DMARC policy is "none"'


def test_dns_errors_are_not_penalized(make_dns):
    timeout = dns.exception.Timeout()
    zone = {
        ("example.com", "TXT"): timeout,
        ("example.com", "MX"): timeout,
        ("_dmarc.example.com", "TXT"): timeout,
    }
    for selector in ("default", "google", "selector1", "selector2", "k1", "dkim", "mail"):
        zone[(f"{selector}._domainkey.example.com", "TXT")] = timeout
    result = check_email_dns(URL, make_dns(zone))
    assert result.score == 100
    assert len(failed(result)) == 4
    assert all(f.priority is Priority.OPTIONAL for f in failed(result))
    assert failed(result)[0].issue == "Could not verify SPF record (timeout)"
