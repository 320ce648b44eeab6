"""
Enumeration types for the domain router.

These enums provide type-safe constants for registry states, fallback
paths, routing targets and logging levels used throughout the package.
"""

from enum import Enum


class VerificationStatus(Enum):
    """Verification state of a domain as recorded by the registry."""

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"


class FallbackSource(Enum):
    """Which fallback path supplied the lookup key for a resolution."""

    NONE = "none"
    PRIMARY_DOMAIN_ENV_VAR = "primary_domain_env_var"
    TLD_MATCHED_DOMAIN = "tld_matched_domain"


class RoutingTarget(Enum):
    """Handler a request is routed to."""

    ROOT_DOMAIN_HANDLER = "root_domain_handler"
    SUBDOMAIN_HANDLER = "subdomain_handler"


class DiagnosticVariant(Enum):
    """Input transformation applied before a routing test."""

    STANDARD = "standard"
    TLD_EXTRACTION = "tld_extraction"
    WWW_INJECTION = "www_injection"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class RegistryErrorCode(Enum):
    """Error codes for domain registry adapters."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    PARSE_ERROR = "parse_error"
    SERVER_ERROR = "server_error"
    FILE_ERROR = "file_error"
