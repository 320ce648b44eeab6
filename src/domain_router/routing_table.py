"""
Routing Table - shared constants for hostname classification and diagnostics.

Both the request path (HostnameParser, DomainResolver) and the operator
tooling (RoutingDiagnostics, CLI) read from this module, so a change to
the subdomain allow-list or a preview suffix applies everywhere at once.
"""

from typing import Optional

# ============================================================================
# HOSTNAME CLASSIFICATION
# ============================================================================
WWW_PREFIX = "www."

# First labels that are routed to the subdomain handler
SUBDOMAIN_ALLOW_LIST = ("landing", "app", "dashboard", "admin")

# Platform-assigned preview hosts, e.g. my-project-git-main.vercel.app
PREVIEW_PLATFORM_SUFFIXES = ("vercel.app",)

# Development hosts, e.g. localhost:3000 or demo.localhost
LOCAL_HOST_MARKERS = ("localhost",)

ROOT_ROUTE = "/(root) route"


def subdomain_route(subdomain: str) -> str:
    """Name of the route a valid subdomain is rewritten to."""
    return f"/{subdomain} route"


# ============================================================================
# ISSUE MESSAGES
# ============================================================================
ISSUE_DOMAIN_NOT_FOUND = "Domain not found in database"
ISSUE_FALLBACK_NOT_FOUND = "Fallback domain {domain} not found in database"
ISSUE_NO_TLD_FALLBACK = (
    "No PRIMARY_DOMAIN configured and no matching domain found for TLD-only request"
)
ISSUE_PREVIEW_WITHOUT_PRIMARY = (
    "Preview or local host {host} received but no PRIMARY_DOMAIN is configured"
)
ISSUE_INVALID_FORMAT = "Invalid domain format: {host}"
ISSUE_IP_LITERAL = "Host is an IP address literal: {host}"
ISSUE_INVALID_SUBDOMAIN = "Invalid subdomain type: {subdomain}. Valid types are: {allowed}"
ISSUE_DOMAIN_INACTIVE = "Domain is inactive."
ISSUE_VERIFICATION_STATUS = 'Domain verification status is "{status}" (should be "active")'
ISSUE_NO_ROOT_PAGE = "No root page configured for this domain."
ISSUE_ROOT_PAGE_INACTIVE = "Root page exists but is not active."
ISSUE_REGISTRY_UNAVAILABLE = "Domain registry unavailable: {error}"
ISSUE_TLD_ONLY_HOST = 'Hostname "{host}" is just a TLD (e.g. "com" instead of "example.com")'
ISSUE_NO_ACTIVE_DOMAINS = "No active domains found in the database"

RECOMMENDATION_AVAILABLE_DOMAINS = "Available domains: {domains}"


# ============================================================================
# RECOMMENDATIONS
# ============================================================================
# Ordered (issue prefix, recommendation) pairs. Parameterised issues are
# matched on the text before their first placeholder. {allowed} is filled
# with the caller's subdomain allow-list.
ISSUE_RECOMMENDATIONS: tuple[tuple[str, str], ...] = (
    (ISSUE_DOMAIN_NOT_FOUND, "Add this domain to the database"),
    ("Fallback domain ", "Add the PRIMARY_DOMAIN domain to the database or correct PRIMARY_DOMAIN"),
    (ISSUE_NO_TLD_FALLBACK, "Set PRIMARY_DOMAIN or add an active domain with this TLD to the database"),
    ("Preview or local host ", "Set PRIMARY_DOMAIN so preview and local hosts resolve to a real domain"),
    ("Invalid domain format", "Send requests with a fully qualified host such as example.com"),
    ("Host is an IP address literal", "Route traffic by domain name rather than by IP address"),
    ("Invalid subdomain type", "Use one of the supported subdomain prefixes: {allowed}"),
    (ISSUE_DOMAIN_INACTIVE, "Activate the domain in the database"),
    ("Domain verification status is ", "Verify the domain with the DNS provider and re-check its verification status"),
    (ISSUE_NO_ROOT_PAGE, "Create a root page via the admin dashboard"),
    (ISSUE_ROOT_PAGE_INACTIVE, "Activate the root page in the database"),
    ("Domain registry unavailable", "Check connectivity to the domain registry and retry the diagnostic"),
    (ISSUE_NO_ACTIVE_DOMAINS, "Add at least one active domain to the database"),
    (
        "Hostname ",
        'Check the Cloudflare SSL mode ("Full" or "Flexible" rather than "Full (strict)") '
        "and that the DNS A record points at the hosting platform",
    ),
)


def recommendation_for(
    issue: str,
    subdomain_allow_list: tuple[str, ...] = SUBDOMAIN_ALLOW_LIST,
) -> Optional[str]:
    """
    Look up the fixed recommendation for an issue message.

    Args:
        issue: Issue message as produced by the resolver or diagnostics
        subdomain_allow_list: Prefixes named in the invalid-subdomain advice

    Returns:
        Recommendation text, or None if the issue is not in the table
    """
    for prefix, recommendation in ISSUE_RECOMMENDATIONS:
        if issue.startswith(prefix):
            return recommendation.replace("{allowed}", ", ".join(subdomain_allow_list))
    return None


def recommendations_for(
    issues: list[str],
    subdomain_allow_list: tuple[str, ...] = SUBDOMAIN_ALLOW_LIST,
) -> list[str]:
    """Derive recommendations for a list of issues, preserving order."""
    recommendations = []
    for issue in issues:
        recommendation = recommendation_for(issue, subdomain_allow_list)
        if recommendation is not None:
            recommendations.append(recommendation)
    return recommendations
