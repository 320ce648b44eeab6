"""
Data models for the domain router.

This module defines the value objects passed between the hostname parser,
the resolver, the registry adapters and the diagnostics tooling.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import DiagnosticVariant, FallbackSource, RoutingTarget, VerificationStatus


@dataclass(frozen=True)
class ParsedHostname:
    """Classification of a single request host header."""

    raw: str  # Host exactly as received
    normalized: str  # Lowercase, no port, no trailing dot, no www.
    had_www_prefix: bool
    label_parts: tuple[str, ...]
    is_tld_only: bool
    is_valid_format: bool
    candidate_subdomain: Optional[str] = None
    invalid_subdomain: Optional[str] = None  # First label rejected by the allow-list
    is_ip_address: bool = False
    is_preview_host: bool = False
    ascii_name: str = ""  # IDNA form of normalized, used for registry lookups

    @property
    def tld(self) -> Optional[str]:
        """Last label, or None when there are no labels or the host is an IP."""
        if not self.label_parts or self.is_ip_address:
            return None
        return self.label_parts[-1] or None

    @property
    def has_subdomain(self) -> bool:
        return self.candidate_subdomain is not None

    @property
    def registrable_name(self) -> str:
        """ASCII name used for the registry lookup (apex when a valid subdomain is present)."""
        name = self.ascii_name or self.normalized
        if self.candidate_subdomain is not None:
            return name.split(".", 1)[1]
        return name

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw": self.raw,
            "normalized": self.normalized,
            "had_www_prefix": self.had_www_prefix,
            "label_parts": list(self.label_parts),
            "is_tld_only": self.is_tld_only,
            "is_valid_format": self.is_valid_format,
            "candidate_subdomain": self.candidate_subdomain,
            "invalid_subdomain": self.invalid_subdomain,
            "is_ip_address": self.is_ip_address,
            "is_preview_host": self.is_preview_host,
            "ascii_name": self.ascii_name,
        }


@dataclass(frozen=True)
class DomainRecord:
    """A domain as stored by the Domain Registry. Read-only for the router."""

    name: str
    is_active: bool = True
    verification_status: VerificationStatus = VerificationStatus.ACTIVE
    has_root_page: bool = False
    root_page_active: bool = False
    redirect_www_to_non_www: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DomainRecord":
        """
        Build a record from a registry JSON object.

        Accepts both snake_case and the camelCase keys used by the admin API.

        Raises:
            KeyError: If the name is missing
            ValueError: If the verification status is unknown
        """
        def pick(snake: str, camel: str, default: Any) -> Any:
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        status = pick("verification_status", "verificationStatus", "active")
        return cls(
            name=str(data["name"]).strip().lower(),
            is_active=bool(pick("is_active", "isActive", True)),
            verification_status=VerificationStatus(str(status).lower()),
            has_root_page=bool(pick("has_root_page", "hasRootPage", False)),
            root_page_active=bool(pick("root_page_active", "rootPageActive", False)),
            redirect_www_to_non_www=bool(
                pick("redirect_www_to_non_www", "redirectWwwToNonWww", False)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "is_active": self.is_active,
            "verification_status": self.verification_status.value,
            "has_root_page": self.has_root_page,
            "root_page_active": self.root_page_active,
            "redirect_www_to_non_www": self.redirect_www_to_non_www,
        }


@dataclass
class ResolutionResult:
    """Outcome of resolving a parsed hostname against the registry."""

    lookup_key: Optional[str]
    matched_domain: Optional[DomainRecord]
    used_fallback: FallbackSource = FallbackSource.NONE
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    registry_error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.matched_domain is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "lookup_key": self.lookup_key,
            "matched_domain": self.matched_domain.to_dict() if self.matched_domain else None,
            "used_fallback": self.used_fallback.value,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
            "registry_error": self.registry_error,
        }


@dataclass
class DiagnosticReport:
    """Full routing diagnosis for one host, as shown to operators."""

    variant: DiagnosticVariant
    input_host: str
    tested_host: str
    parsed: ParsedHostname
    resolution: ResolutionResult
    routing_target: RoutingTarget
    routed_to: str
    primary_domain: Optional[str]
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    error: Optional[str] = None
    available_domains: list[str] = field(default_factory=list)  # Active names, listed when the lookup missed
    matching_domains: Optional[list[str]] = None  # Active names sharing the TLD, TLD-only hosts only

    @property
    def ok(self) -> bool:
        return not self.issues and self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "variant": self.variant.value,
            "input_host": self.input_host,
            "tested_host": self.tested_host,
            "parsed": self.parsed.to_dict(),
            "resolution": self.resolution.to_dict(),
            "routing_target": self.routing_target.value,
            "routed_to": self.routed_to,
            "primary_domain": {
                "set": self.primary_domain is not None,
                "value": self.primary_domain or "",
            },
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
            "error": self.error,
            "available_domains": list(self.available_domains),
            "matching_domains": (
                list(self.matching_domains) if self.matching_domains is not None else None
            ),
        }


@dataclass
class ProbeResult:
    """Result of a single HEAD request against a live URL."""

    url: str
    success: bool = False
    status_code: Optional[int] = None
    headers: dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    redirect: Optional[str] = None
    platform_404: bool = False  # 404 served by the hosting platform
    response_time_ms: float = 0.0


@dataclass
class RootDomainProbeReport:
    """Combined root and www probe results for one domain."""

    domain: str
    root: ProbeResult
    www: ProbeResult
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        def probe_dict(probe: ProbeResult) -> dict[str, Any]:
            return {
                "url": probe.url,
                "success": probe.success,
                "status_code": probe.status_code,
                "headers": dict(probe.headers),
                "error": probe.error,
                "redirect": probe.redirect,
                "platform_404": probe.platform_404,
                "response_time_ms": probe.response_time_ms,
            }

        return {
            "domain": self.domain,
            "root_domain_test": probe_dict(self.root),
            "www_domain_test": probe_dict(self.www),
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
        }
