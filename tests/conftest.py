"""Shared fixtures: fake HTTP sites and fake DNS zones."""

import struct
from types import SimpleNamespace

import dns.resolver
import httpx
import pytest

from site_grader.probes import DnsProbe, ProbeClient


def png_bytes(width: int, height: int) -> bytes:
    """Smallest PNG header the sniffer can read."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + struct.pack(">II", width, height) + b"\x08\x06\x00\x00\x00"


class FakeSite:
    """Routes request paths to canned responses for httpx.MockTransport.

    A route value is ``(status, body)`` or an exception instance to raise.
    Unknown paths answer 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        status, body = route
        if request.method == "HEAD":
            return httpx.Response(status)
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, text=body)

    def hits(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)


class FakeResolver:
    """Stands in for dns.resolver.Resolver.

    ``zone`` maps ``(name, rdtype)`` to a list of record strings or to an
    exception instance. Missing names raise NXDOMAIN.
    """

    def __init__(self, zone=None):
        self.zone = dict(zone or {})

    def resolve(self, name, rdtype, lifetime=None):
        value = self.zone.get((name, rdtype))
        if value is None:
            raise dns.resolver.NXDOMAIN()
        if isinstance(value, Exception):
            raise value
        if rdtype == "MX":
            return [SimpleNamespace(exchange=record) for record in value]
        return [SimpleNamespace(strings=(record.encode(),)) for record in value]


@pytest.fixture
def make_probes():
    """Build a ProbeClient backed by a FakeSite."""
    clients = []

    def factory(routes=None):
        site = FakeSite(routes)
        client = httpx.Client(transport=httpx.MockTransport(site))
        clients.append(client)
        probes = ProbeClient(client=client)
        probes.site = site
        return probes

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def make_dns():
    def factory(zone=None):
        return DnsProbe(resolver=FakeResolver(zone))
    return factory


@pytest.fixture
def healthy_routes():
    """A site that serves every probed resource."""
    return {
        "/robots.txt": (200, "User-agent: *\nAllow: /\nSitemap: https://example.com/sitemap.xml\n"),
        "/sitemap.xml": (200, "<urlset></urlset>"),
        "/llms.txt": (200, "# Example\n\n> " + "Example company builds tools for teams. " * 5),
        "/.well-known/mcp": (200, '{"name": "example", "version": "1.0.0", "tools": []}'),
        "/og.png": (200, png_bytes(1200, 630)),
    }
