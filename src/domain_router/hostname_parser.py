"""
Hostname parsing and classification module.

Turns a raw ``Host`` header into a ParsedHostname: normalized form,
labels, TLD-only detection, www handling and subdomain classification.
Parsing never raises; malformed input degrades to ``is_valid_format=False``.
"""

import re
from typing import Optional

import idna

from .models import ParsedHostname
from .routing_table import (
    LOCAL_HOST_MARKERS,
    PREVIEW_PLATFORM_SUFFIXES,
    SUBDOMAIN_ALLOW_LIST,
    WWW_PREFIX,
)


IPV4_PATTERN = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")

# Control characters, whitespace and URL/shell metacharacters never appear
# in a host name. Letters, digits, hyphen, dot and non-ASCII are allowed.
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~]'
)


class HostnameParser:
    """
    Classifies request hosts.

    Handles:
    - Lowercasing, port and trailing-dot removal
    - A single leading ``www.`` prefix
    - Rejection of hosts with forbidden characters
    - IDNA lookup form of international hosts (``ascii_name``)
    - IP literal and preview/local host short-circuits
    - Subdomain detection against the allow-list
    """

    def __init__(
        self,
        subdomain_allow_list: tuple[str, ...] = SUBDOMAIN_ALLOW_LIST,
        preview_suffixes: tuple[str, ...] = PREVIEW_PLATFORM_SUFFIXES,
        local_host_markers: tuple[str, ...] = LOCAL_HOST_MARKERS,
    ) -> None:
        """
        Initialize the parser.

        Args:
            subdomain_allow_list: First labels accepted as subdomains
            preview_suffixes: Host suffixes assigned by a preview platform
            local_host_markers: Labels identifying development hosts
        """
        self._allow_list = tuple(s.lower() for s in subdomain_allow_list)
        self._preview_suffixes = tuple(s.lower().strip(".") for s in preview_suffixes)
        self._local_markers = tuple(m.lower() for m in local_host_markers)

    @property
    def subdomain_allow_list(self) -> tuple[str, ...]:
        return self._allow_list

    def parse(self, raw_host: Optional[str]) -> ParsedHostname:
        """
        Parse a raw host header.

        Args:
            raw_host: Host header value, e.g. 'WWW.Example.com:443'

        Returns:
            ParsedHostname describing the host
        """
        raw = raw_host if isinstance(raw_host, str) else ""
        host = raw.strip().lower()

        # Bracketed IPv6 literal, optionally with a port
        if host.startswith("["):
            literal = host.split("]", 1)[0] + "]"
            return ParsedHostname(
                raw=raw,
                normalized=literal,
                had_www_prefix=False,
                label_parts=(literal,),
                is_tld_only=False,
                is_valid_format=False,
                is_ip_address=True,
                ascii_name=literal,
            )

        host = host.split(":", 1)[0].rstrip(".")

        had_www_prefix = host.startswith(WWW_PREFIX)
        if had_www_prefix:
            host = host[len(WWW_PREFIX):]

        labels = tuple(host.split(".")) if host else ()
        is_ip_address = bool(IPV4_PATTERN.match(host))
        is_preview_host = self._is_preview_host(host, labels)
        has_forbidden_chars = bool(FORBIDDEN_CHARS_PATTERN.search(host))

        is_tld_only = len(labels) == 1 and not is_ip_address and not has_forbidden_chars
        is_valid_format = (
            len(labels) >= 2
            and all(labels)
            and not is_ip_address
            and not has_forbidden_chars
        )

        candidate_subdomain = None
        invalid_subdomain = None
        if is_valid_format and not is_preview_host and len(labels) >= 3:
            first = labels[0]
            if first in self._allow_list:
                candidate_subdomain = first
            elif first != WWW_PREFIX.rstrip("."):
                invalid_subdomain = first

        return ParsedHostname(
            raw=raw,
            normalized=host,
            had_www_prefix=had_www_prefix,
            label_parts=labels,
            is_tld_only=is_tld_only,
            is_valid_format=is_valid_format,
            candidate_subdomain=candidate_subdomain,
            invalid_subdomain=invalid_subdomain,
            is_ip_address=is_ip_address,
            is_preview_host=is_preview_host,
            ascii_name=self._encode_idna(host),
        )

    def _is_preview_host(self, host: str, labels: tuple[str, ...]) -> bool:
        for suffix in self._preview_suffixes:
            if host == suffix or host.endswith("." + suffix):
                return True
        return any(marker in labels for marker in self._local_markers)

    @staticmethod
    def _encode_idna(host: str) -> str:
        """IDNA-encode non-ASCII hosts; leave the text unchanged if encoding fails."""
        if all(ord(c) < 128 for c in host):
            return host
        try:
            return idna.encode(host, uts46=True).decode("ascii")
        except (idna.IDNAError, UnicodeError):
            return host


_default_parser = HostnameParser()


def parse(raw_host: Optional[str]) -> ParsedHostname:
    """Parse a host header with the shared routing table."""
    return _default_parser.parse(raw_host)
