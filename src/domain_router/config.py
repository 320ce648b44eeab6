"""
Configuration dataclasses for the domain router.

This module defines the configuration structures used throughout the
package, including routing constants, registry access, live probing and
logging, plus loaders for environment variables and JSON files.
"""

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .routing_table import PREVIEW_PLATFORM_SUFFIXES, SUBDOMAIN_ALLOW_LIST


@dataclass
class RoutingConfig:
    """Hostname classification and fallback settings."""

    primary_domain: Optional[str] = None
    subdomain_allow_list: tuple[str, ...] = SUBDOMAIN_ALLOW_LIST
    preview_suffixes: tuple[str, ...] = PREVIEW_PLATFORM_SUFFIXES


@dataclass
class RegistryConfig:
    """Where domain records are read from."""

    file_path: Optional[Path] = None
    base_url: Optional[str] = None
    api_token: Optional[str] = None
    timeout_seconds: float = 5.0


@dataclass
class ProbeConfig:
    """Live root/www probe settings."""

    timeout_seconds: float = 10.0
    user_agent: str = "Domain-Tester/1.0"


@dataclass
class LoggingConfig:
    """Logging and audit configuration."""

    level: str = "info"
    audit_mode: bool = False
    audit_signing_key: Optional[str] = None
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main configuration combining all sub-configurations."""

    routing: RoutingConfig = field(default_factory=RoutingConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            code="invalid_number",
            message=f"{name} must be a number, got {raw!r}",
            details={"variable": name, "value": raw},
        )


def _optional_env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def load_config_from_env(dotenv_path: Optional[Path] = None) -> SystemConfig:
    """
    Build configuration from environment variables.

    A .env file is loaded first (without overriding variables that are
    already set). PRIMARY_DOMAIN is lowercased and stripped of a leading
    ``www.`` so it can be passed straight to the registry.

    Args:
        dotenv_path: Optional explicit .env location

    Returns:
        SystemConfig populated from the environment

    Raises:
        ConfigurationError: If a numeric variable cannot be parsed
    """
    load_dotenv(dotenv_path=dotenv_path)

    primary_domain = _optional_env("PRIMARY_DOMAIN")
    if primary_domain:
        primary_domain = primary_domain.lower()
        if primary_domain.startswith("www."):
            primary_domain = primary_domain[4:]

    registry_file = _optional_env("REGISTRY_FILE")

    return SystemConfig(
        routing=RoutingConfig(primary_domain=primary_domain),
        registry=RegistryConfig(
            file_path=Path(registry_file) if registry_file else None,
            base_url=_optional_env("REGISTRY_URL"),
            api_token=_optional_env("REGISTRY_API_TOKEN"),
            timeout_seconds=_float_env("REGISTRY_TIMEOUT", 5.0),
        ),
        probe=ProbeConfig(
            timeout_seconds=_float_env("PROBE_TIMEOUT", 10.0),
        ),
        logging=LoggingConfig(
            level=(_optional_env("LOG_LEVEL") or "info").lower(),
            audit_mode=os.getenv("AUDIT_MODE", "0") == "1",
            audit_signing_key=_optional_env("AUDIT_SIGNING_KEY"),
            output_format=(_optional_env("LOG_FORMAT") or "text").lower(),
        ),
    )


def load_config_from_file(config_path: Path) -> Optional[SystemConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        SystemConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        routing_data = data.get("routing", {})
        routing = RoutingConfig(
            primary_domain=routing_data.get("primary_domain"),
            subdomain_allow_list=tuple(
                routing_data.get("subdomain_allow_list", SUBDOMAIN_ALLOW_LIST)
            ),
            preview_suffixes=tuple(
                routing_data.get("preview_suffixes", PREVIEW_PLATFORM_SUFFIXES)
            ),
        )

        registry_data = data.get("registry", {})
        file_path = registry_data.get("file_path")
        registry = RegistryConfig(
            file_path=Path(file_path) if file_path else None,
            base_url=registry_data.get("base_url"),
            api_token=registry_data.get("api_token"),
            timeout_seconds=float(registry_data.get("timeout_seconds", 5.0)),
        )

        probe_data = data.get("probe", {})
        probe = ProbeConfig(
            timeout_seconds=float(probe_data.get("timeout_seconds", 10.0)),
            user_agent=probe_data.get("user_agent", "Domain-Tester/1.0"),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", "info"),
            audit_mode=logging_data.get("audit_mode", False),
            audit_signing_key=logging_data.get("audit_signing_key"),
            output_format=logging_data.get("output_format", "text"),
        )

        return SystemConfig(
            routing=routing,
            registry=registry,
            probe=probe,
            logging=logging_config,
        )

    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None
    except OSError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
