"""
Command-line interface for the domain router.

This module provides the operator entry point with commands for:
- test: Standard routing test for a host
- test-tld: Test only the TLD of a domain (TLD-only request simulation)
- test-www: Test a domain with a forced www. prefix
- probe-root: Live HEAD probe of a domain's root and www URLs
- config: Show the effective configuration
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .config import SystemConfig, load_config_from_env, load_config_from_file
from .diagnostics import RoutingDiagnostics
from .exceptions import ConfigurationError, DomainRouterError
from .models import DiagnosticReport, RootDomainProbeReport
from .registry import DomainRegistry, HTTPDomainRegistry, InMemoryDomainRegistry
from .root_domain_probe import RootDomainProbe


def load_config(args: argparse.Namespace) -> SystemConfig:
    """
    Resolve configuration from --config, the environment and CLI overrides.

    Raises:
        ConfigurationError: If --config points at an unreadable file
    """
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
        if config is None:
            raise ConfigurationError(
                code="config_unreadable",
                message=f"Could not load config from {args.config}",
            )
    else:
        config = load_config_from_env()

    if getattr(args, "primary_domain", None):
        config.routing.primary_domain = args.primary_domain
    if getattr(args, "registry_file", None):
        config.registry.file_path = Path(args.registry_file)
    if getattr(args, "registry_url", None):
        config.registry.base_url = args.registry_url
    return config


def create_logger(config: SystemConfig, verbose: bool = False) -> AuditLogger:
    """
    Create the audit logger described by the logging configuration.

    Raises:
        ConfigurationError: If the log level or output format is unknown
    """
    level = "debug" if verbose else config.logging.level
    try:
        logger = AuditLogger.from_level_name(level, output_format=config.logging.output_format)
    except ValueError as e:
        raise ConfigurationError(code="invalid_logging_config", message=str(e))
    if config.logging.audit_mode and config.logging.audit_signing_key:
        logger.enable_audit_mode(config.logging.audit_signing_key)
    return logger


def create_registry(config: SystemConfig) -> DomainRegistry:
    """
    Create the registry adapter named by the configuration.

    A registry file takes precedence over a registry URL.

    Raises:
        ConfigurationError: If neither is configured
        RegistryError: If the registry file cannot be loaded
    """
    if config.registry.file_path is not None:
        return InMemoryDomainRegistry.from_file(config.registry.file_path)
    if config.registry.base_url:
        return HTTPDomainRegistry(
            base_url=config.registry.base_url,
            timeout=config.registry.timeout_seconds,
            api_token=config.registry.api_token,
        )
    raise ConfigurationError(
        code="registry_not_configured",
        message="No domain registry configured; set REGISTRY_FILE or REGISTRY_URL",
    )


def print_report(report: DiagnosticReport, as_json: bool = False) -> None:
    """Print a diagnostic report as JSON or plain text lists."""
    if as_json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return

    print(f"Routing test ({report.variant.value}) for: {report.input_host}")
    if report.tested_host != report.input_host:
        print(f"  Tested host: {report.tested_host}")
    print(f"  Normalized: {report.parsed.normalized or '(empty)'}")
    print(f"  Routed to: {report.routed_to} ({report.routing_target.value})")
    if report.primary_domain:
        print(f"  PRIMARY_DOMAIN: {report.primary_domain}")
    else:
        print("  PRIMARY_DOMAIN: not set")

    resolution = report.resolution
    if resolution.matched_domain is not None:
        print(f"  Matched domain: {resolution.matched_domain.name}")
    else:
        print("  Matched domain: none")
    print(f"  Fallback used: {resolution.used_fallback.value}")
    if report.matching_domains is not None:
        print(f"  Domains with this TLD: {', '.join(report.matching_domains) or 'none'}")
    if report.available_domains:
        print(f"  Available domains: {', '.join(report.available_domains)}")

    if report.error:
        print(f"Error: {report.error}")
    if report.issues:
        print("Issues:")
        for issue in report.issues:
            print(f"  - {issue}")
    if report.recommendations:
        print("Recommendations:")
        for recommendation in report.recommendations:
            print(f"  - {recommendation}")
    if report.ok:
        print("No issues found.")


def print_probe_report(report: RootDomainProbeReport, as_json: bool = False) -> None:
    """Print a root domain probe report as JSON or plain text lists."""
    if as_json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return

    print(f"Root domain probe for: {report.domain}")
    for label, probe in (("Root", report.root), ("www", report.www)):
        if probe.error:
            print(f"  {label}: {probe.url} -> error: {probe.error}")
        else:
            line = f"  {label}: {probe.url} -> {probe.status_code}"
            if probe.redirect:
                line += f" (redirect to {probe.redirect})"
            print(line)
    if report.issues:
        print("Issues:")
        for issue in report.issues:
            print(f"  - {issue}")
    if report.recommendations:
        print("Recommendations:")
        for recommendation in report.recommendations:
            print(f"  - {recommendation}")


def run_diagnostic(args: argparse.Namespace) -> int:
    """Handle the 'test', 'test-tld' and 'test-www' commands."""
    try:
        config = load_config(args)
        logger = create_logger(config, verbose=args.verbose)
        registry = create_registry(config)
    except DomainRouterError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2

    diagnostics = RoutingDiagnostics.from_registry(
        registry,
        routing_config=config.routing,
        logger=logger,
    )

    try:
        if args.command == "test-tld":
            report = diagnostics.test_tld_extraction(args.domain)
        elif args.command == "test-www":
            report = diagnostics.test_www_injection(args.domain)
        else:
            report = diagnostics.test_domain_routing(args.host)
    finally:
        if isinstance(registry, HTTPDomainRegistry):
            registry.close()

    print_report(report, as_json=args.json)
    return 0 if report.ok else 1


async def run_probe(domain: str, config: SystemConfig, logger: AuditLogger) -> RootDomainProbeReport:
    async with RootDomainProbe(
        timeout=config.probe.timeout_seconds,
        user_agent=config.probe.user_agent,
        logger=logger,
    ) as probe:
        return await probe.probe(domain)


def cmd_probe_root(args: argparse.Namespace) -> int:
    """Handle the 'probe-root' command."""
    try:
        config = load_config(args)
        logger = create_logger(config, verbose=args.verbose)
        report = asyncio.run(run_probe(args.domain, config, logger))
    except DomainRouterError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2

    print_probe_report(report, as_json=args.json)
    return 0 if not report.issues else 1


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config show' command."""
    try:
        config = load_config(args)
    except DomainRouterError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2

    print("Effective configuration:")
    print(f"  PRIMARY_DOMAIN: {config.routing.primary_domain or 'not set'}")
    print(f"  Subdomain allow-list: {', '.join(config.routing.subdomain_allow_list)}")
    print(f"  Preview suffixes: {', '.join(config.routing.preview_suffixes)}")
    print(f"  Registry file: {config.registry.file_path or 'not set'}")
    print(f"  Registry URL: {config.registry.base_url or 'not set'}")
    print(f"  Registry timeout: {config.registry.timeout_seconds}s")
    print(f"  Probe timeout: {config.probe.timeout_seconds}s")
    print(f"  Log level: {config.logging.level}")
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser, registry: bool = True) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to JSON configuration file (default: environment / .env)",
    )
    parser.add_argument(
        "--primary-domain",
        help="Override PRIMARY_DOMAIN",
    )
    if registry:
        parser.add_argument(
            "--registry-file",
            help="JSON file with domain records",
        )
        parser.add_argument(
            "--registry-url",
            help="Base URL of the admin registry API",
        )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-router",
        description="Hostname routing diagnostics for multi-tenant domains",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    test_parser = subparsers.add_parser("test", help="Test how a host is routed")
    test_parser.add_argument("host", help="Host header to test (e.g., www.example.com)")
    _add_common_arguments(test_parser)
    test_parser.set_defaults(func=run_diagnostic)

    tld_parser = subparsers.add_parser(
        "test-tld",
        help="Test only the TLD of a domain, as a TLD-only request",
    )
    tld_parser.add_argument("domain", help="Full domain (e.g., example.com)")
    _add_common_arguments(tld_parser)
    tld_parser.set_defaults(func=run_diagnostic)

    www_parser = subparsers.add_parser(
        "test-www",
        help="Test a domain with a forced www. prefix",
    )
    www_parser.add_argument("domain", help="Domain (e.g., example.com)")
    _add_common_arguments(www_parser)
    www_parser.set_defaults(func=run_diagnostic)

    probe_parser = subparsers.add_parser(
        "probe-root",
        help="Send live HEAD requests to the root and www URLs",
    )
    probe_parser.add_argument("domain", help="Domain to probe")
    _add_common_arguments(probe_parser, registry=False)
    probe_parser.set_defaults(func=cmd_probe_root)

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument("action", choices=["show"], help="Configuration action")
    _add_common_arguments(config_parser)
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
