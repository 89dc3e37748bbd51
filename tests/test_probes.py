import dns.exception
import dns.resolver
import httpx

from site_grader.config import Settings
from site_grader.imaging import ImageSize
from site_grader.probes import ProbeClient, ProbeStatus

from conftest import png_bytes

BASE = "https://example.com"


def test_text_probe_present_and_absent(make_probes):
    probes = make_probes({"/robots.txt": (200, "User-agent: *\n")})
    robots = probes.robots_txt(BASE)
    assert robots.status is ProbeStatus.PRESENT
    assert robots.data == "User-agent: *\n"
    assert robots.status_code == 200

    sitemap = probes.sitemap_xml(BASE)
    assert sitemap.status is ProbeStatus.ABSENT
    assert sitemap.status_code == 404
    assert not sitemap.found


def test_server_error_is_absent(make_probes):
    probes = make_probes({"/robots.txt": (500, "oops")})
    assert probes.robots_txt(BASE).status is ProbeStatus.ABSENT


def test_timeout_and_network_errors(make_probes):
    probes = make_probes({
        "/llms.txt": httpx.ReadTimeout("timed out"),
        "/robots.txt": httpx.ConnectError("connection refused"),
    })
    llms = probes.llms_txt(BASE)
    assert llms.status is ProbeStatus.ERROR
    assert llms.reason == "timeout"

    robots = probes.robots_txt(BASE)
    assert robots.status is ProbeStatus.ERROR
    assert "refused" in robots.reason


def test_malformed_urls_are_errors(make_probes):
    probes = make_probes({})
    bad = "https://exa\x01mple.com/og.png"
    assert probes.get_text(bad).status is ProbeStatus.ERROR
    image = probes.image_bytes(bad)
    assert image.status is ProbeStatus.ERROR
    assert image.reason == "invalid url"
    assert probes.image_dimensions(bad) is None
    assert probes.site.requests == []


def test_llms_txt_length_gate(make_probes):
    probes = make_probes({"/llms.txt": (200, "# Too short")})
    result = probes.llms_txt(BASE)
    assert result.status is ProbeStatus.INVALID
    assert result.reason == "short"
    assert result.found

    probes = make_probes({"/llms.txt": (200, "x" * 100)})
    assert probes.llms_txt(BASE).status is ProbeStatus.PRESENT


def test_mcp_manifest_classification(make_probes):
    probes = make_probes({"/.well-known/mcp": (200, '{"name": "svc", "tools": [{"name": "t"}]}')})
    result = probes.mcp_manifest(BASE)
    assert result.status is ProbeStatus.PRESENT
    assert result.data["name"] == "svc"

    probes = make_probes({"/.well-known/mcp": (200, '{"name": "svc"}')})
    result = probes.mcp_manifest(BASE)
    assert result.status is ProbeStatus.INVALID
    assert result.reason == "incomplete"

    probes = make_probes({"/.well-known/mcp": (200, '{"name": "svc", "tools": "all"}')})
    assert probes.mcp_manifest(BASE).reason == "incomplete"

    probes = make_probes({"/.well-known/mcp": (200, "<html>not json</html>")})
    result = probes.mcp_manifest(BASE)
    assert result.status is ProbeStatus.INVALID
    assert result.reason == "malformed"


def test_mcp_probe_asks_for_json(make_probes):
    probes = make_probes({"/.well-known/mcp": (200, "{}")})
    probes.mcp_manifest(BASE)
    assert probes.site.requests[0].headers["accept"] == "application/json"


def test_responses_are_memoized(make_probes):
    probes = make_probes({"/robots.txt": (200, "User-agent: *\n")})
    first = probes.robots_txt(BASE)
    second = probes.robots_txt(BASE)
    assert first is second
    assert probes.site.hits("/robots.txt") == 1


def test_image_dimensions(make_probes):
    probes = make_probes({"/og.png": (200, png_bytes(1200, 630))})
    assert probes.image_dimensions(f"{BASE}/og.png") == ImageSize(1200, 630)
    # HEAD then GET
    assert [r.method for r in probes.site.requests] == ["HEAD", "GET"]


def test_image_missing_or_unreadable(make_probes):
    probes = make_probes({"/og.svg": (200, b"<svg></svg>")})
    assert probes.image_dimensions(f"{BASE}/missing.png") is None
    assert probes.image_dimensions(f"{BASE}/og.svg") is None


def test_image_timeout_is_none(make_probes):
    probes = make_probes({"/og.png": httpx.ReadTimeout("slow")})
    assert probes.image_bytes(f"{BASE}/og.png").status is ProbeStatus.ERROR
    assert probes.image_dimensions(f"{BASE}/og.png") is None


def test_image_download_is_capped():
    body = png_bytes(10, 10) + b"\x00" * 5000
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
    with ProbeClient(client=httpx.Client(transport=transport), settings=Settings(max_image_bytes=64)) as probes:
        result = probes.image_bytes(f"{BASE}/big.png")
        assert len(result.data) == 64
        assert probes.image_dimensions(f"{BASE}/big.png") == ImageSize(10, 10)


def test_dns_txt_and_mx(make_dns):
    probe = make_dns({
        ("example.com", "TXT"): ["v=spf1 include:_spf.google.com ~all"],
        ("example.com", "MX"): ["mx1.example.com.", "mx2.example.com."],
    })
    txt = probe.txt("example.com")
    assert txt.status is ProbeStatus.PRESENT
    assert txt.data == ["v=spf1 include:_spf.google.com ~all"]
    assert probe.mx("example.com").data == ["mx1.example.com", "mx2.example.com"]


def test_dns_absent_and_errors(make_dns):
    probe = make_dns({
        ("noanswer.example", "TXT"): dns.resolver.NoAnswer(),
        ("slow.example", "TXT"): dns.exception.Timeout(),
        ("broken.example", "TXT"): dns.resolver.NoNameservers(),
        ("empty.example", "TXT"): [],
    })
    assert probe.txt("missing.example").status is ProbeStatus.ABSENT
    assert probe.txt("noanswer.example").status is ProbeStatus.ABSENT
    assert probe.txt("empty.example").status is ProbeStatus.ABSENT

    slow = probe.txt("slow.example")
    assert slow.status is ProbeStatus.ERROR
    assert slow.reason == "timeout"
    assert probe.txt("broken.example").status is ProbeStatus.ERROR
