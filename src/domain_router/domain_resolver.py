"""
Domain resolution for parsed hostnames.

Decides which registered domain a request belongs to. Literal lookups come
first; TLD-only requests fall back to PRIMARY_DOMAIN and then to a domain
sharing the received TLD, in that order. Problems are reported as issue
strings rather than raised, and each known issue carries a fixed
recommendation from the routing table.
"""

from typing import Callable, Optional

from .enums import FallbackSource, VerificationStatus
from .exceptions import DomainRouterError
from .models import DomainRecord, ParsedHostname, ResolutionResult
from .registry import DomainRegistry
from .routing_table import (
    ISSUE_DOMAIN_INACTIVE,
    ISSUE_DOMAIN_NOT_FOUND,
    ISSUE_FALLBACK_NOT_FOUND,
    ISSUE_INVALID_FORMAT,
    ISSUE_INVALID_SUBDOMAIN,
    ISSUE_IP_LITERAL,
    ISSUE_NO_ROOT_PAGE,
    ISSUE_NO_TLD_FALLBACK,
    ISSUE_PREVIEW_WITHOUT_PRIMARY,
    ISSUE_REGISTRY_UNAVAILABLE,
    ISSUE_ROOT_PAGE_INACTIVE,
    ISSUE_VERIFICATION_STATUS,
    SUBDOMAIN_ALLOW_LIST,
    WWW_PREFIX,
    recommendations_for,
)


LookupByName = Callable[[str], Optional[DomainRecord]]
LookupByTld = Callable[[str], Optional[DomainRecord]]


def normalize_fallback_domain(domain: Optional[str]) -> Optional[str]:
    """Lowercase a configured fallback domain and drop a leading www."""
    if domain is None:
        return None
    cleaned = domain.strip().lower().rstrip(".")
    if cleaned.startswith(WWW_PREFIX):
        cleaned = cleaned[len(WWW_PREFIX):]
    return cleaned or None


class DomainResolver:
    """
    Resolves a ParsedHostname against the Domain Registry.

    Resolution has no hidden state: the same inputs and a deterministic
    lookup always give the same ResolutionResult.
    """

    def __init__(self, subdomain_allow_list: tuple[str, ...] = SUBDOMAIN_ALLOW_LIST) -> None:
        self._allow_list = tuple(subdomain_allow_list)

    @property
    def subdomain_allow_list(self) -> tuple[str, ...]:
        return self._allow_list

    def resolve(
        self,
        parsed: ParsedHostname,
        lookup_by_exact_name: LookupByName,
        configured_fallback_domain: Optional[str] = None,
        lookup_by_tld: Optional[LookupByTld] = None,
    ) -> ResolutionResult:
        """
        Resolve a parsed hostname to a domain record.

        Args:
            parsed: Output of HostnameParser.parse
            lookup_by_exact_name: Registry exact-name lookup
            configured_fallback_domain: PRIMARY_DOMAIN, if configured
            lookup_by_tld: Registry TLD lookup, used only for TLD-only hosts

        Returns:
            ResolutionResult with the matched record, fallback path,
            issues and recommendations
        """
        fallback = normalize_fallback_domain(configured_fallback_domain)
        result = ResolutionResult(lookup_key=None, matched_domain=None)

        if parsed.invalid_subdomain is not None:
            result.issues.append(ISSUE_INVALID_SUBDOMAIN.format(
                subdomain=parsed.invalid_subdomain,
                allowed=", ".join(self._allow_list),
            ))

        try:
            self._find_domain(parsed, lookup_by_exact_name, fallback, lookup_by_tld, result)
        except DomainRouterError as e:
            result.registry_error = e.message
            result.issues.append(ISSUE_REGISTRY_UNAVAILABLE.format(error=e.message))
        except Exception as e:
            result.registry_error = f"{type(e).__name__}: {e}"
            result.issues.append(ISSUE_REGISTRY_UNAVAILABLE.format(error=result.registry_error))

        if result.matched_domain is not None:
            result.issues.extend(self._check_record(result.matched_domain))

        result.recommendations = recommendations_for(result.issues, self._allow_list)
        return result

    def resolve_with_registry(
        self,
        parsed: ParsedHostname,
        registry: DomainRegistry,
        configured_fallback_domain: Optional[str] = None,
    ) -> ResolutionResult:
        """Resolve using both lookups of a DomainRegistry."""
        return self.resolve(
            parsed,
            registry.lookup_by_exact_name,
            configured_fallback_domain,
            registry.lookup_by_tld,
        )

    def _find_domain(
        self,
        parsed: ParsedHostname,
        lookup_by_exact_name: LookupByName,
        fallback: Optional[str],
        lookup_by_tld: Optional[LookupByTld],
        result: ResolutionResult,
    ) -> None:
        # Preview and local hosts never name a tenant themselves
        if parsed.is_preview_host:
            if fallback:
                self._lookup_fallback(fallback, lookup_by_exact_name, result)
                return
            result.issues.append(ISSUE_PREVIEW_WITHOUT_PRIMARY.format(host=parsed.normalized))
            if parsed.is_valid_format:
                self._lookup_literal(parsed, lookup_by_exact_name, result)
            return

        if parsed.is_valid_format:
            self._lookup_literal(parsed, lookup_by_exact_name, result)
            return

        if parsed.is_tld_only:
            if fallback:
                self._lookup_fallback(fallback, lookup_by_exact_name, result)
                return
            tld_match = lookup_by_tld(parsed.registrable_name) if lookup_by_tld else None
            if tld_match is not None:
                result.used_fallback = FallbackSource.TLD_MATCHED_DOMAIN
                result.lookup_key = tld_match.name
                result.matched_domain = tld_match
                return
            result.issues.append(ISSUE_NO_TLD_FALLBACK)
            return

        if parsed.is_ip_address:
            result.issues.append(ISSUE_IP_LITERAL.format(host=parsed.normalized))
        else:
            result.issues.append(ISSUE_INVALID_FORMAT.format(host=parsed.normalized or parsed.raw))

    @staticmethod
    def _lookup_literal(
        parsed: ParsedHostname,
        lookup_by_exact_name: LookupByName,
        result: ResolutionResult,
    ) -> None:
        result.lookup_key = parsed.registrable_name
        result.matched_domain = lookup_by_exact_name(result.lookup_key)
        if result.matched_domain is None:
            result.issues.append(ISSUE_DOMAIN_NOT_FOUND)

    @staticmethod
    def _lookup_fallback(
        fallback: str,
        lookup_by_exact_name: LookupByName,
        result: ResolutionResult,
    ) -> None:
        result.used_fallback = FallbackSource.PRIMARY_DOMAIN_ENV_VAR
        result.lookup_key = fallback
        result.matched_domain = lookup_by_exact_name(fallback)
        if result.matched_domain is None:
            result.issues.append(ISSUE_FALLBACK_NOT_FOUND.format(domain=fallback))

    @staticmethod
    def _check_record(record: DomainRecord) -> list[str]:
        issues = []
        if not record.is_active:
            issues.append(ISSUE_DOMAIN_INACTIVE)
        if record.verification_status != VerificationStatus.ACTIVE:
            issues.append(ISSUE_VERIFICATION_STATUS.format(status=record.verification_status.value))
        if record.is_active:
            if not record.has_root_page:
                issues.append(ISSUE_NO_ROOT_PAGE)
            elif not record.root_page_active:
                issues.append(ISSUE_ROOT_PAGE_INACTIVE)
        return issues


_default_resolver = DomainResolver()


def resolve(
    parsed: ParsedHostname,
    lookup_by_exact_name: LookupByName,
    configured_fallback_domain: Optional[str] = None,
    lookup_by_tld: Optional[LookupByTld] = None,
) -> ResolutionResult:
    """Resolve with the shared routing table."""
    return _default_resolver.resolve(
        parsed, lookup_by_exact_name, configured_fallback_domain, lookup_by_tld
    )
