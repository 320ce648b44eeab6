"""
Live root-domain probe.

Sends HEAD requests to ``https://<domain>`` and ``https://www.<domain>``
without following redirects, then reports routing problems: 404s served by
the hosting platform, error statuses, a root URL matched to the subdomain
route, and whether www redirects to the bare domain.

Network failures are recorded on the probe result and never raised.
"""

import asyncio
import time
from typing import Optional
from urllib.parse import urlparse

import httpx

from .audit_logger import AuditLogger
from .exceptions import ProbeError
from .models import ProbeResult, RootDomainProbeReport
from .routing_table import WWW_PREFIX


COMPONENT = "root_domain_probe"

SUBDOMAIN_MATCHED_PATH = "/[subdomain]"


def _is_platform_404(response: httpx.Response) -> bool:
    return response.status_code == 404 and (
        response.headers.get("server", "").lower() == "vercel"
        or "x-vercel-id" in response.headers
    )


class RootDomainProbe:
    """
    Async prober for a domain's root and www URLs.

    Use as an async context manager so the underlying client is closed.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = "Domain-Tester/1.0",
        logger: Optional[AuditLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the probe.

        Args:
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header sent with each request
            logger: Optional audit logger
            transport: Optional httpx transport (used by tests)
        """
        self._timeout = timeout
        self._user_agent = user_agent
        self._logger = logger
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "RootDomainProbe":
        self._client = httpx.AsyncClient(
            verify=True,
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=False,
            headers={"User-Agent": self._user_agent},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def probe(self, domain: str) -> RootDomainProbeReport:
        """
        Probe the root and www URLs of a domain.

        Args:
            domain: Domain to probe; a leading www. is removed

        Returns:
            RootDomainProbeReport with both results, issues and recommendations

        Raises:
            ProbeError: If called outside the async context manager or with
                an empty domain
        """
        if self._client is None:
            raise ProbeError(
                code="client_not_started",
                message="RootDomainProbe must be used as an async context manager",
            )

        clean = domain.strip().lower()
        if clean.startswith(WWW_PREFIX):
            clean = clean[len(WWW_PREFIX):]
        if not clean:
            raise ProbeError(code="empty_domain", message="Domain is required")

        root, www = await asyncio.gather(
            self._head(f"https://{clean}"),
            self._head(f"https://www.{clean}"),
        )
        report = RootDomainProbeReport(domain=clean, root=root, www=www)
        self._analyze(report)

        if self._logger is not None:
            self._logger.info(COMPONENT, "Root domain probe completed", {
                "domain": clean,
                "root_status": root.status_code,
                "www_status": www.status_code,
                "issues": list(report.issues),
            })
        return report

    async def _head(self, url: str) -> ProbeResult:
        result = ProbeResult(url=url)
        start = time.monotonic()
        try:
            response = await self._client.head(url)
        except httpx.HTTPError as e:
            result.error = str(e) or type(e).__name__
            result.response_time_ms = (time.monotonic() - start) * 1000
            if self._logger is not None:
                self._logger.log_error(COMPONENT, "Probe request failed", error=e, request_url=url)
            return result

        result.response_time_ms = (time.monotonic() - start) * 1000
        result.status_code = response.status_code
        result.success = response.status_code < 400
        result.headers = {name.lower(): value for name, value in response.headers.items()}
        if 300 <= response.status_code < 400:
            result.redirect = response.headers.get("location")
        result.platform_404 = _is_platform_404(response)

        return result

    @staticmethod
    def _analyze(report: RootDomainProbeReport) -> None:
        root, www = report.root, report.www
        issues, recommendations = report.issues, report.recommendations

        if root.error is not None:
            issues.append(f"Error testing root domain: {root.error}")
        elif root.platform_404:
            issues.append("Root domain returns 404 from Vercel - domain is configured but not routing correctly")
            recommendations.append("Check that the middleware routes root domain requests to the root handler")
            recommendations.append("Make sure the domain is added in the Vercel project settings")
        elif root.status_code is not None and root.status_code >= 400:
            issues.append(f"Root domain returns error status {root.status_code}")

        if www.error is not None:
            issues.append(f"Error testing www domain: {www.error}")
        elif www.redirect:
            host = urlparse(www.redirect).hostname
            if host == report.domain:
                recommendations.append(
                    f"www subdomain redirects to non-www version ({www.status_code} redirect) - this is good"
                )
        elif www.platform_404:
            issues.append("www domain returns 404 from Vercel - subdomain is configured but not routing correctly")
        elif www.status_code is not None and www.status_code >= 400:
            issues.append(f"www domain returns error status {www.status_code}")

        if not root.success and not www.success:
            recommendations.append("Both root domain and www subdomain are not working - check DNS configuration")
            recommendations.append("Make sure the domain is added to Vercel and DNS points to Vercel")
        elif not root.success:
            recommendations.append("Root domain is not working but www subdomain is - check the root domain DNS record")
        elif not www.success:
            recommendations.append("Root domain is working but www subdomain is not - check the www DNS record")

        if root.headers.get("x-matched-path") == SUBDOMAIN_MATCHED_PATH:
            issues.append("Root domain is being incorrectly matched to the [subdomain] route")
            recommendations.append("Fix the middleware so root domain requests are not rewritten to a subdomain route")
