"""
Tests for the live root-domain probe.

Requests are served by httpx.MockTransport so no network access is needed.
"""

import asyncio
import io

import httpx
import pytest

from domain_router.audit_logger import AuditLogger
from domain_router.enums import LogLevel
from domain_router.exceptions import ProbeError
from domain_router.root_domain_probe import RootDomainProbe


def run_probe(handler, domain: str = "example.com", logger=None):
    async def go():
        async with RootDomainProbe(
            timeout=1.0,
            logger=logger,
            transport=httpx.MockTransport(handler),
        ) as probe:
            return await probe.probe(domain)

    return asyncio.run(go())


def by_host(responses: dict):
    def handler(request: httpx.Request) -> httpx.Response:
        result = responses[request.url.host]
        if isinstance(result, Exception):
            raise result
        return result

    return handler


class TestRootDomainProbe:
    """Analysis of root and www responses."""

    def test_healthy_domain_with_www_redirect(self) -> None:
        report = run_probe(by_host({
            "example.com": httpx.Response(200),
            "www.example.com": httpx.Response(301, headers={"Location": "https://example.com/"}),
        }))

        assert report.issues == []
        assert report.root.status_code == 200
        assert report.www.redirect == "https://example.com/"
        assert report.recommendations == [
            "www subdomain redirects to non-www version (301 redirect) - this is good"
        ]

    def test_platform_404_on_root(self) -> None:
        report = run_probe(by_host({
            "example.com": httpx.Response(404, headers={"Server": "Vercel"}),
            "www.example.com": httpx.Response(200),
        }))

        assert report.root.platform_404
        assert report.issues == [
            "Root domain returns 404 from Vercel - domain is configured but not routing correctly"
        ]
        assert "Root domain is not working but www subdomain is - check the root domain DNS record" \
            in report.recommendations

    def test_error_statuses(self) -> None:
        report = run_probe(by_host({
            "example.com": httpx.Response(502),
            "www.example.com": httpx.Response(404),
        }))

        assert report.issues == [
            "Root domain returns error status 502",
            "www domain returns error status 404",
        ]
        assert report.recommendations[0].startswith("Both root domain and www subdomain are not working")

    def test_connection_errors_are_recorded(self) -> None:
        request = httpx.Request("HEAD", "https://example.com")
        stream = io.StringIO()
        logger = AuditLogger(output_format="text", output_stream=stream)

        report = run_probe(by_host({
            "example.com": httpx.ConnectError("connection refused", request=request),
            "www.example.com": httpx.Response(200),
        }), logger=logger)

        assert report.root.error == "connection refused"
        assert not report.root.success
        assert report.issues == ["Error testing root domain: connection refused"]
        levels = [e.level for e in logger.entries]
        assert LogLevel.ERROR in levels
        assert levels[-1] == LogLevel.INFO

    def test_root_matched_to_subdomain_route(self) -> None:
        report = run_probe(by_host({
            "example.com": httpx.Response(200, headers={"x-matched-path": "/[subdomain]"}),
            "www.example.com": httpx.Response(200),
        }))

        assert report.issues == ["Root domain is being incorrectly matched to the [subdomain] route"]

    def test_www_prefix_is_removed(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.host, request.headers["user-agent"]))
            return httpx.Response(200)

        report = run_probe(handler, domain="WWW.Example.com")

        assert report.domain == "example.com"
        assert sorted(host for _, host, _ in seen) == ["example.com", "www.example.com"]
        assert all(method == "HEAD" for method, _, _ in seen)
        assert all(agent == "Domain-Tester/1.0" for _, _, agent in seen)

    def test_report_to_dict(self) -> None:
        report = run_probe(lambda request: httpx.Response(200))
        data = report.to_dict()

        assert data["domain"] == "example.com"
        assert data["root_domain_test"]["status_code"] == 200
        assert data["www_domain_test"]["url"] == "https://www.example.com"

    def test_requires_context_manager(self) -> None:
        with pytest.raises(ProbeError):
            asyncio.run(RootDomainProbe().probe("example.com"))

    def test_empty_domain(self) -> None:
        with pytest.raises(ProbeError) as exc_info:
            run_probe(lambda request: httpx.Response(200), domain="  ")

        assert exc_info.value.code == "empty_domain"
