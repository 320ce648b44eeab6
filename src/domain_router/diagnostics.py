"""
Routing diagnostics for operator tooling.

Combines hostname parsing and domain resolution into a single report that
names the handler a host is routed to, lists configuration issues and
suggests fixes. Three variants share the same parse + resolve core and
differ only in how the input host is transformed:

- standard: the host is tested as given
- TLD extraction: only the TLD of the given domain is tested
- www injection: a ``www.`` prefix is forced onto the given domain

When a lookup misses, the active domains in the registry are listed so the
operator can see what the host could have matched. Diagnostics never
modify the registry and may be called as often as needed.
"""

from typing import Callable, Optional

from .audit_logger import AuditLogger
from .config import RoutingConfig
from .domain_resolver import DomainResolver, LookupByName, LookupByTld, normalize_fallback_domain
from .enums import DiagnosticVariant, RoutingTarget
from .exceptions import DomainRouterError
from .hostname_parser import HostnameParser
from .models import DiagnosticReport, DomainRecord, ParsedHostname, ResolutionResult
from .registry import DomainRegistry
from .routing_table import (
    ISSUE_NO_ACTIVE_DOMAINS,
    ISSUE_TLD_ONLY_HOST,
    RECOMMENDATION_AVAILABLE_DOMAINS,
    ROOT_ROUTE,
    WWW_PREFIX,
    recommendation_for,
    recommendations_for,
    subdomain_route,
)


COMPONENT = "routing_diagnostics"

ListActiveDomains = Callable[[], list[DomainRecord]]


class RoutingDiagnostics:
    """Read-only routing tests against a Domain Registry."""

    def __init__(
        self,
        lookup_by_exact_name: LookupByName,
        configured_fallback_domain: Optional[str] = None,
        lookup_by_tld: Optional[LookupByTld] = None,
        routing_config: Optional[RoutingConfig] = None,
        logger: Optional[AuditLogger] = None,
        list_active_domains: Optional[ListActiveDomains] = None,
    ) -> None:
        """
        Initialize diagnostics.

        Args:
            lookup_by_exact_name: Registry exact-name lookup
            configured_fallback_domain: PRIMARY_DOMAIN, if configured
            lookup_by_tld: Registry TLD lookup for TLD-only hosts
            routing_config: Allow-list and preview suffix overrides
            logger: Optional sink for one diagnostic record per test
            list_active_domains: Registry listing of active domains
        """
        routing_config = routing_config or RoutingConfig()
        self._lookup_by_exact_name = lookup_by_exact_name
        self._lookup_by_tld = lookup_by_tld
        self._list_active_domains = list_active_domains
        self._fallback = normalize_fallback_domain(configured_fallback_domain)
        self._parser = HostnameParser(
            subdomain_allow_list=routing_config.subdomain_allow_list,
            preview_suffixes=routing_config.preview_suffixes,
        )
        self._resolver = DomainResolver(subdomain_allow_list=routing_config.subdomain_allow_list)
        self._logger = logger

    @classmethod
    def from_registry(
        cls,
        registry: DomainRegistry,
        routing_config: Optional[RoutingConfig] = None,
        logger: Optional[AuditLogger] = None,
    ) -> "RoutingDiagnostics":
        """Build diagnostics over all lookups of a registry."""
        routing_config = routing_config or RoutingConfig()
        return cls(
            lookup_by_exact_name=registry.lookup_by_exact_name,
            configured_fallback_domain=routing_config.primary_domain,
            lookup_by_tld=registry.lookup_by_tld,
            routing_config=routing_config,
            logger=logger,
            list_active_domains=registry.list_active,
        )

    @property
    def primary_domain(self) -> Optional[str]:
        return self._fallback

    def diagnose(
        self,
        raw_host: str,
        variant: DiagnosticVariant = DiagnosticVariant.STANDARD,
        input_host: Optional[str] = None,
    ) -> DiagnosticReport:
        """
        Run a routing test for one host.

        Args:
            raw_host: Host to test, exactly as a request would carry it
            variant: Which named test produced raw_host
            input_host: What the operator typed, when it differs from raw_host

        Returns:
            DiagnosticReport for the host
        """
        parsed = self._parser.parse(raw_host)
        resolution = self._resolver.resolve(
            parsed,
            self._lookup_by_exact_name,
            self._fallback,
            self._lookup_by_tld,
        )
        allow_list = self._resolver.subdomain_allow_list

        if parsed.candidate_subdomain is not None:
            routing_target = RoutingTarget.SUBDOMAIN_HANDLER
            routed_to = subdomain_route(parsed.candidate_subdomain)
        else:
            routing_target = RoutingTarget.ROOT_DOMAIN_HANDLER
            routed_to = ROOT_ROUTE

        issues = []
        # localhost is a single label but is a dev host, not a stripped TLD
        if parsed.is_tld_only and not parsed.is_preview_host:
            issues.append(ISSUE_TLD_ONLY_HOST.format(host=parsed.normalized))
        issues.extend(resolution.issues)
        recommendations = recommendations_for(issues, allow_list)

        registry_error = resolution.registry_error
        available_domains: list[str] = []
        matching_domains: Optional[list[str]] = None
        if registry_error is None:
            try:
                available_domains, matching_domains = self._list_domains(
                    parsed, resolution, issues, recommendations
                )
            except DomainRouterError as e:
                registry_error = e.message
            except Exception as e:
                registry_error = f"{type(e).__name__}: {e}"

        error = None
        if registry_error is not None:
            error = f"Could not query the domain registry: {registry_error}"

        report = DiagnosticReport(
            variant=variant,
            input_host=input_host if input_host is not None else raw_host,
            tested_host=raw_host,
            parsed=parsed,
            resolution=resolution,
            routing_target=routing_target,
            routed_to=routed_to,
            primary_domain=self._fallback,
            issues=issues,
            recommendations=recommendations,
            error=error,
            available_domains=available_domains,
            matching_domains=matching_domains,
        )
        self._record(report)
        return report

    def _list_domains(
        self,
        parsed: ParsedHostname,
        resolution: ResolutionResult,
        issues: list[str],
        recommendations: list[str],
    ) -> tuple[list[str], Optional[list[str]]]:
        """List active domains after a missed lookup and, for TLD-only hosts, those sharing the TLD."""
        if self._list_active_domains is None:
            return [], None

        tld_only = parsed.is_tld_only and not parsed.is_preview_host
        missed = resolution.matched_domain is None and (
            resolution.lookup_key is not None or tld_only
        )
        if not missed and not tld_only:
            return [], None

        names = sorted(record.name for record in self._list_active_domains() if record.is_active)

        matching_domains = None
        if tld_only:
            suffix = "." + parsed.registrable_name
            matching_domains = [name for name in names if name.endswith(suffix)]

        if not missed:
            return [], matching_domains
        if names:
            recommendations.append(RECOMMENDATION_AVAILABLE_DOMAINS.format(domains=", ".join(names)))
        else:
            issues.append(ISSUE_NO_ACTIVE_DOMAINS)
            recommendations.append(recommendation_for(ISSUE_NO_ACTIVE_DOMAINS))
        return names, matching_domains

    def test_domain_routing(self, raw_host: str) -> DiagnosticReport:
        """Standard test: the host is tested as given."""
        return self.diagnose(raw_host, DiagnosticVariant.STANDARD)

    def test_tld_extraction(self, domain: str) -> DiagnosticReport:
        """Test only the TLD of a full domain, as a misconfigured proxy would send it."""
        parsed = self._parser.parse(domain)
        tld = parsed.tld or parsed.normalized
        return self.diagnose(tld, DiagnosticVariant.TLD_EXTRACTION, input_host=domain)

    def test_www_injection(self, domain: str) -> DiagnosticReport:
        """Test the domain with a ``www.`` prefix forced onto it."""
        host = domain.strip()
        if not host.lower().startswith(WWW_PREFIX):
            host = WWW_PREFIX + host
        return self.diagnose(host, DiagnosticVariant.WWW_INJECTION, input_host=domain)

    def _record(self, report: DiagnosticReport) -> None:
        if self._logger is None:
            return
        data = {
            "variant": report.variant.value,
            "input_host": report.input_host,
            "tested_host": report.tested_host,
            "lookup_key": report.resolution.lookup_key,
            "matched_domain": (
                report.resolution.matched_domain.name
                if report.resolution.matched_domain else None
            ),
            "used_fallback": report.resolution.used_fallback.value,
            "routing_target": report.routing_target.value,
            "issues": list(report.issues),
        }
        # A failing log sink must not change the report
        try:
            if report.error is not None:
                self._logger.warn(COMPONENT, report.error, data)
            else:
                self._logger.info(COMPONENT, "Routing diagnosis completed", data)
        except Exception:
            pass


def diagnose(
    raw_host: str,
    lookup_by_exact_name: LookupByName,
    configured_fallback_domain: Optional[str] = None,
    lookup_by_tld: Optional[LookupByTld] = None,
) -> DiagnosticReport:
    """Standard routing test with the shared routing table."""
    diagnostics = RoutingDiagnostics(
        lookup_by_exact_name=lookup_by_exact_name,
        configured_fallback_domain=configured_fallback_domain,
        lookup_by_tld=lookup_by_tld,
    )
    return diagnostics.diagnose(raw_host)
