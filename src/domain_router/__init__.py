"""
Domain Router - hostname resolution and routing diagnostics for multi-tenant domains.

This package classifies incoming request hosts, resolves them against a
domain registry with explicit TLD-only and preview-host fallbacks, and
produces routing diagnostics for operators.
"""

__version__ = "0.1.0"
__author__ = "Domain Router Team"

from domain_router.exceptions import (
    DomainRouterError,
    RegistryError,
    ConfigurationError,
    ProbeError,
)
from domain_router.enums import (
    VerificationStatus,
    FallbackSource,
    RoutingTarget,
    DiagnosticVariant,
    LogLevel,
    RegistryErrorCode,
)
from domain_router.models import (
    ParsedHostname,
    DomainRecord,
    ResolutionResult,
    DiagnosticReport,
    ProbeResult,
    RootDomainProbeReport,
)
from domain_router.config import (
    RoutingConfig,
    RegistryConfig,
    ProbeConfig,
    LoggingConfig,
    SystemConfig,
    load_config_from_env,
    load_config_from_file,
)
from domain_router.hostname_parser import (
    HostnameParser,
    parse,
)
from domain_router.domain_resolver import (
    DomainResolver,
    resolve,
)
from domain_router.registry import (
    DomainRegistry,
    InMemoryDomainRegistry,
    HTTPDomainRegistry,
)
from domain_router.diagnostics import (
    RoutingDiagnostics,
    diagnose,
)
from domain_router.root_domain_probe import (
    RootDomainProbe,
)
from domain_router.audit_logger import (
    AuditLogger,
    LogEntry,
)

__all__ = [
    # Exceptions
    "DomainRouterError",
    "RegistryError",
    "ConfigurationError",
    "ProbeError",
    # Enums
    "VerificationStatus",
    "FallbackSource",
    "RoutingTarget",
    "DiagnosticVariant",
    "LogLevel",
    "RegistryErrorCode",
    # Models
    "ParsedHostname",
    "DomainRecord",
    "ResolutionResult",
    "DiagnosticReport",
    "ProbeResult",
    "RootDomainProbeReport",
    # Configuration
    "RoutingConfig",
    "RegistryConfig",
    "ProbeConfig",
    "LoggingConfig",
    "SystemConfig",
    "load_config_from_env",
    "load_config_from_file",
    # Hostname Parser
    "HostnameParser",
    "parse",
    # Domain Resolver
    "DomainResolver",
    "resolve",
    # Registry
    "DomainRegistry",
    "InMemoryDomainRegistry",
    "HTTPDomainRegistry",
    # Diagnostics
    "RoutingDiagnostics",
    "diagnose",
    # Root Domain Probe
    "RootDomainProbe",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
]
