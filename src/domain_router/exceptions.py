"""
Exception classes for the domain router.

All exceptions inherit from DomainRouterError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DomainRouterError(Exception):
    """Base exception for all domain router errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class RegistryError(DomainRouterError):
    """Raised when a domain registry lookup fails or times out."""

    pass


class ConfigurationError(DomainRouterError):
    """Raised when configuration values are missing or malformed."""

    pass


class ProbeError(DomainRouterError):
    """Raised when a live root-domain probe cannot be set up."""

    pass
