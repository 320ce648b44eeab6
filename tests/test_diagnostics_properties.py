"""
Property-based tests for routing diagnostics.

Covers the three test variants, routing target selection, issue
propagation from the resolver and the diagnostic log record.
"""

import io
import json
import string

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_router.audit_logger import AuditLogger
from domain_router.config import RoutingConfig
from domain_router.diagnostics import RoutingDiagnostics, diagnose
from domain_router.enums import DiagnosticVariant, FallbackSource, LogLevel, RoutingTarget
from domain_router.exceptions import RegistryError
from domain_router.models import DomainRecord
from domain_router.registry import InMemoryDomainRegistry
from domain_router.routing_table import ISSUE_NO_ACTIVE_DOMAINS, ISSUE_NO_ROOT_PAGE, ISSUE_NO_TLD_FALLBACK


def healthy(name: str) -> DomainRecord:
    return DomainRecord(name=name, is_active=True, has_root_page=True, root_page_active=True)


label = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=10).filter(
    lambda s: s not in {"www", "localhost", "vercel", "landing", "app", "dashboard", "admin"}
)
tld = st.sampled_from(["com", "net", "org", "io"])


class BrokenLogger(AuditLogger):
    def log(self, level, component, message, data=None):
        raise OSError("log sink closed")


class TestScenarios:
    """Fixed operator scenarios."""

    def test_tld_only_host(self) -> None:
        registry = InMemoryDomainRegistry([healthy("example.net")])
        report = RoutingDiagnostics.from_registry(registry).test_domain_routing("com")

        assert report.routing_target == RoutingTarget.ROOT_DOMAIN_HANDLER
        assert report.routed_to == "/(root) route"
        assert report.issues[0].startswith('Hostname "com" is just a TLD')
        assert ISSUE_NO_TLD_FALLBACK in report.issues
        assert report.recommendations[0].startswith("Check the Cloudflare SSL mode")
        assert not report.ok

    def test_www_host_routes_to_root(self) -> None:
        registry = InMemoryDomainRegistry([healthy("example.com")])
        report = RoutingDiagnostics.from_registry(registry).test_domain_routing("www.example.com")

        assert report.parsed.had_www_prefix
        assert report.routing_target == RoutingTarget.ROOT_DOMAIN_HANDLER
        assert report.resolution.matched_domain.name == "example.com"
        assert report.issues == []
        assert report.ok

    def test_subdomain_host(self) -> None:
        registry = InMemoryDomainRegistry([healthy("example.com")])
        report = RoutingDiagnostics.from_registry(registry).test_domain_routing("landing.example.com")

        assert report.routing_target == RoutingTarget.SUBDOMAIN_HANDLER
        assert report.routed_to == "/landing route"
        assert report.resolution.lookup_key == "example.com"

    def test_missing_root_page(self) -> None:
        registry = InMemoryDomainRegistry([DomainRecord(name="example.com")])
        report = RoutingDiagnostics.from_registry(registry).test_domain_routing("example.com")

        assert report.issues == [ISSUE_NO_ROOT_PAGE]
        assert report.recommendations == ["Create a root page via the admin dashboard"]

    def test_primary_domain_is_used_for_tld_only_host(self) -> None:
        registry = InMemoryDomainRegistry([healthy("example.com")])
        diagnostics = RoutingDiagnostics.from_registry(
            registry, routing_config=RoutingConfig(primary_domain="www.Example.com")
        )

        report = diagnostics.test_domain_routing("com")

        assert diagnostics.primary_domain == "example.com"
        assert report.resolution.used_fallback == FallbackSource.PRIMARY_DOMAIN_ENV_VAR
        assert report.resolution.matched_domain.name == "example.com"
        assert report.to_dict()["primary_domain"] == {"set": True, "value": "example.com"}


class TestVariantsProperty:
    """
    Property 1: variants only transform the host under test.

    *For any* domain, TLD extraction SHALL test the last label and www
    injection SHALL test the domain with exactly one www. prefix.
    """

    @given(name=label, suffix=tld)
    @settings(max_examples=100)
    def test_tld_extraction(self, name: str, suffix: str) -> None:
        registry = InMemoryDomainRegistry([healthy(f"{name}.{suffix}")])
        diagnostics = RoutingDiagnostics.from_registry(registry)

        report = diagnostics.test_tld_extraction(f"{name}.{suffix}")

        assert report.variant == DiagnosticVariant.TLD_EXTRACTION
        assert report.input_host == f"{name}.{suffix}"
        assert report.tested_host == suffix
        assert report.parsed.is_tld_only
        assert report.resolution.used_fallback == FallbackSource.TLD_MATCHED_DOMAIN

    @given(name=label, suffix=tld, prefixed=st.booleans())
    @settings(max_examples=100)
    def test_www_injection(self, name: str, suffix: str, prefixed: bool) -> None:
        domain = f"{name}.{suffix}"
        registry = InMemoryDomainRegistry([healthy(domain)])
        diagnostics = RoutingDiagnostics.from_registry(registry)

        report = diagnostics.test_www_injection(("www." if prefixed else "") + domain)

        assert report.variant == DiagnosticVariant.WWW_INJECTION
        assert report.tested_host == "www." + domain
        assert report.parsed.had_www_prefix
        assert report.resolution.matched_domain.name == domain
        assert report.ok

    @given(host=st.one_of(tld, st.builds(lambda a, b: f"{a}.{b}", label, tld)))
    @settings(max_examples=100)
    def test_diagnose_is_repeatable(self, host: str) -> None:
        registry = InMemoryDomainRegistry([healthy("example.com")])
        diagnostics = RoutingDiagnostics.from_registry(registry)

        first = diagnostics.test_domain_routing(host).to_dict()
        second = diagnostics.test_domain_routing(host).to_dict()

        assert first == second
        json.dumps(first)


class TestRoutingTargetProperty:
    """
    Property 2: the subdomain handler is chosen only for allow-listed prefixes.
    """

    @given(prefix=st.sampled_from(["landing", "app", "dashboard", "admin"]), name=label, suffix=tld)
    @settings(max_examples=100)
    def test_allow_listed(self, prefix: str, name: str, suffix: str) -> None:
        report = diagnose(f"{prefix}.{name}.{suffix}", lambda n: None)

        assert report.routing_target == RoutingTarget.SUBDOMAIN_HANDLER
        assert report.routed_to == f"/{prefix} route"

    @given(prefix=label, name=label, suffix=tld)
    @settings(max_examples=100)
    def test_other_prefixes_route_to_root(self, prefix: str, name: str, suffix: str) -> None:
        report = diagnose(f"{prefix}.{name}.{suffix}", lambda n: None)

        assert report.routing_target == RoutingTarget.ROOT_DOMAIN_HANDLER
        assert report.issues[0].startswith(f"Invalid subdomain type: {prefix}")


class TestRegistryErrorReporting:
    """Registry failures surface as report errors, not exceptions."""

    def test_registry_error(self) -> None:
        def failing_lookup(name: str):
            raise RegistryError(code="network_error", message="connection refused")

        report = diagnose("example.com", failing_lookup)

        assert report.error == "Could not query the domain registry: connection refused"
        assert report.resolution.matched_domain is None
        assert not report.ok


class TestDiagnosticLogging:
    """Each diagnosis emits exactly one log record."""

    def test_one_info_entry_per_diagnosis(self) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream)
        registry = InMemoryDomainRegistry([healthy("example.com")])
        diagnostics = RoutingDiagnostics.from_registry(registry, logger=logger)

        diagnostics.test_domain_routing("www.example.com")

        assert len(logger.entries) == 1
        entry = logger.entries[0]
        assert entry.level == LogLevel.INFO
        assert entry.component == "routing_diagnostics"
        assert entry.data["matched_domain"] == "example.com"
        assert json.loads(stream.getvalue().strip())["data"]["tested_host"] == "www.example.com"

    def test_registry_error_is_logged_as_warning(self) -> None:
        logger = AuditLogger(output_format="text", output_stream=io.StringIO())

        def failing_lookup(name: str):
            raise RegistryError(code="timeout", message="timed out")

        RoutingDiagnostics(failing_lookup, logger=logger).test_domain_routing("example.com")

        assert [e.level for e in logger.entries] == [LogLevel.WARN]

    def test_failing_logger_does_not_change_report(self) -> None:
        registry = InMemoryDomainRegistry([healthy("example.com")])
        quiet = RoutingDiagnostics.from_registry(registry)
        noisy = RoutingDiagnostics.from_registry(registry, logger=BrokenLogger(output_stream=io.StringIO()))

        assert noisy.test_domain_routing("example.com") == quiet.test_domain_routing("example.com")


class TestDomainListingProperty:
    """
    Property 3: missed lookups list the active domains.

    *For any* registry, a host that resolves to nothing SHALL report every
    active domain name, or the empty-registry issue when there are none.
    """

    @given(names=st.lists(st.builds(lambda a, b: f"{a}.{b}", label, tld), max_size=5, unique=True),
           inactive=st.lists(st.booleans(), min_size=5, max_size=5))
    @settings(max_examples=100)
    def test_available_domains_after_miss(self, names: list, inactive: list) -> None:
        records = [
            DomainRecord(name=name, is_active=not off, has_root_page=True, root_page_active=True)
            for name, off in zip(names, inactive)
        ]
        registry = InMemoryDomainRegistry(records)
        report = RoutingDiagnostics.from_registry(registry).test_domain_routing("missing.example")

        active = sorted(r.name for r in records if r.is_active)
        assert report.available_domains == active
        assert report.matching_domains is None
        if active:
            assert report.recommendations[-1] == f"Available domains: {', '.join(active)}"
            assert ISSUE_NO_ACTIVE_DOMAINS not in report.issues
        else:
            assert report.issues[-1] == ISSUE_NO_ACTIVE_DOMAINS
            assert report.recommendations[-1] == "Add at least one active domain to the database"

    def test_no_listing_when_found(self) -> None:
        registry = InMemoryDomainRegistry([healthy("example.com"), healthy("other.net")])
        report = RoutingDiagnostics.from_registry(registry).test_domain_routing("example.com")

        assert report.available_domains == []
        assert report.matching_domains is None
        assert report.ok

    def test_tld_only_lists_matching_domains(self) -> None:
        registry = InMemoryDomainRegistry([
            healthy("zeta.com"),
            healthy("beta.com"),
            DomainRecord(name="gone.com", is_active=False),
            healthy("example.net"),
        ])
        report = RoutingDiagnostics.from_registry(registry).test_domain_routing("com")

        assert report.resolution.matched_domain.name == "beta.com"
        assert report.matching_domains == ["beta.com", "zeta.com"]
        assert report.available_domains == []
        assert report.to_dict()["matching_domains"] == ["beta.com", "zeta.com"]

    def test_tld_only_without_matches(self) -> None:
        registry = InMemoryDomainRegistry([healthy("example.net")])
        report = RoutingDiagnostics.from_registry(registry).test_domain_routing("com")

        assert report.matching_domains == []
        assert report.available_domains == ["example.net"]

    def test_listing_failure_is_reported(self) -> None:
        def failing_listing():
            raise RegistryError(code="timeout", message="listing timed out")

        diagnostics = RoutingDiagnostics(lambda name: None, list_active_domains=failing_listing)
        report = diagnostics.test_domain_routing("example.com")

        assert report.error == "Could not query the domain registry: listing timed out"
        assert report.available_domains == []


class TestLocalHostDiagnostics:
    """Development hosts are not reported as stripped TLDs."""

    def test_localhost_has_no_tld_issue(self) -> None:
        report = diagnose("localhost:3000", lambda name: None)

        assert report.parsed.is_tld_only
        assert not any(issue.startswith("Hostname ") for issue in report.issues)
        assert not any("Cloudflare" in r for r in report.recommendations)
        assert report.issues[0].startswith("Preview or local host localhost")

    def test_localhost_with_primary_domain_is_clean(self) -> None:
        registry = InMemoryDomainRegistry([healthy("example.com")])
        diagnostics = RoutingDiagnostics.from_registry(
            registry, routing_config=RoutingConfig(primary_domain="example.com")
        )

        assert diagnostics.test_domain_routing("localhost:3000").ok


class TestAllowListOverrideDiagnostics:
    """Custom allow-lists flow into both the issue and its recommendation."""

    def test_custom_allow_list(self) -> None:
        registry = InMemoryDomainRegistry([healthy("example.com")])
        diagnostics = RoutingDiagnostics.from_registry(
            registry, routing_config=RoutingConfig(subdomain_allow_list=("shop", "blog"))
        )

        report = diagnostics.test_domain_routing("landing.example.com")

        assert report.routing_target == RoutingTarget.ROOT_DOMAIN_HANDLER
        assert report.issues[0].endswith("Valid types are: shop, blog")
        assert report.recommendations[0] == "Use one of the supported subdomain prefixes: shop, blog"
