"""
Domain Registry adapters.

The router only ever reads from the registry: an exact-name lookup, a
lookup by TLD for TLD-only requests, and a listing of active domains for
diagnostics. Two adapters are provided, a
dict-backed registry (optionally loaded from JSON) and an HTTP client
for the admin API with a bounded timeout.

Callers must pass case-normalized names.
"""

import json
from pathlib import Path
from typing import Iterable, Optional, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from .enums import RegistryErrorCode
from .exceptions import RegistryError
from .models import DomainRecord


@runtime_checkable
class DomainRegistry(Protocol):
    """Read-only lookup capability consumed by the resolver."""

    def lookup_by_exact_name(self, name: str) -> Optional[DomainRecord]:
        ...

    def lookup_by_tld(self, tld: str) -> Optional[DomainRecord]:
        ...

    def list_active(self) -> list[DomainRecord]:
        ...


def pick_tld_match(records: Iterable[DomainRecord], tld: str) -> Optional[DomainRecord]:
    """
    Choose the domain used for a TLD-only request.

    Only active domains ending in ``.<tld>`` qualify; ties are broken by
    taking the lexicographically first name.
    """
    suffix = "." + tld.lower()
    matches = sorted(
        (r for r in records if r.is_active and r.name.endswith(suffix)),
        key=lambda r: r.name,
    )
    return matches[0] if matches else None


class InMemoryDomainRegistry:
    """Dict-backed registry keyed by lowercase domain name."""

    def __init__(self, records: Optional[Iterable[DomainRecord]] = None) -> None:
        self._records: dict[str, DomainRecord] = {}
        for record in records or []:
            self.add(record)

    def add(self, record: DomainRecord) -> None:
        self._records[record.name.lower()] = record

    @property
    def records(self) -> list[DomainRecord]:
        return sorted(self._records.values(), key=lambda r: r.name)

    def lookup_by_exact_name(self, name: str) -> Optional[DomainRecord]:
        return self._records.get(name)

    def lookup_by_tld(self, tld: str) -> Optional[DomainRecord]:
        return pick_tld_match(self._records.values(), tld)

    def list_active(self) -> list[DomainRecord]:
        return [r for r in self.records if r.is_active]

    @classmethod
    def from_file(cls, file_path: Path) -> "InMemoryDomainRegistry":
        """
        Load a registry from a JSON file.

        The file holds either a list of domain objects or an object with a
        ``domains`` list.

        Raises:
            RegistryError: If the file cannot be read or parsed
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise RegistryError(
                code=RegistryErrorCode.FILE_ERROR.value,
                message=f"Could not read registry file: {e}",
                details={"file_path": str(file_path)},
            )
        except json.JSONDecodeError as e:
            raise RegistryError(
                code=RegistryErrorCode.PARSE_ERROR.value,
                message=f"Registry file is not valid JSON: {e}",
                details={"file_path": str(file_path)},
            )

        items = data.get("domains", []) if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise RegistryError(
                code=RegistryErrorCode.PARSE_ERROR.value,
                message="Registry file must contain a list of domains",
                details={"file_path": str(file_path)},
            )

        try:
            return cls(DomainRecord.from_dict(item) for item in items)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise RegistryError(
                code=RegistryErrorCode.PARSE_ERROR.value,
                message=f"Invalid domain entry in registry file: {e}",
                details={"file_path": str(file_path)},
            )


class HTTPDomainRegistry:
    """
    Registry client for the admin API.

    ``GET {base_url}/domains/{name}`` returns one domain object or 404;
    ``GET {base_url}/domains?active=true`` (optionally with ``tld=``) returns
    a list. Names are percent-encoded into the path.
    Every request is bounded by the configured timeout.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        api_token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Admin API root, e.g. 'https://admin.example.com/api'
            timeout: Per-request timeout in seconds
            api_token: Optional bearer token
            transport: Optional httpx transport (used by tests)
        """
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def __enter__(self) -> "HTTPDomainRegistry":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def lookup_by_exact_name(self, name: str) -> Optional[DomainRecord]:
        data = self._get_json(f"/domains/{quote(name, safe='')}")
        if data is None:
            return None
        return self._to_record(data)

    def lookup_by_tld(self, tld: str) -> Optional[DomainRecord]:
        records = self._get_domain_list({"tld": tld, "active": "true"})
        return pick_tld_match(records, tld)

    def list_active(self) -> list[DomainRecord]:
        records = self._get_domain_list({"active": "true"})
        return sorted((r for r in records if r.is_active), key=lambda r: r.name)

    def _get_domain_list(self, params: dict) -> list[DomainRecord]:
        data = self._get_json("/domains", params=params)
        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("domains", [])
        if not isinstance(data, list):
            raise RegistryError(
                code=RegistryErrorCode.PARSE_ERROR.value,
                message="Registry returned an unexpected payload for a domain listing",
                details={"params": params},
            )
        return [self._to_record(item) for item in data]

    def _get_json(self, path: str, params: Optional[dict] = None):
        """GET a JSON document; None on 404, RegistryError on any other failure."""
        url = f"{self._base_url}{path}"
        try:
            response = self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise RegistryError(
                code=RegistryErrorCode.TIMEOUT.value,
                message=f"Registry request timed out: {e}",
                details={"url": url},
            )
        except httpx.HTTPError as e:
            raise RegistryError(
                code=RegistryErrorCode.NETWORK_ERROR.value,
                message=f"Registry request failed: {e}",
                details={"url": url},
            )

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise RegistryError(
                code=RegistryErrorCode.SERVER_ERROR.value,
                message=f"Registry returned HTTP {response.status_code}",
                details={"url": url, "status_code": response.status_code},
            )

        try:
            return response.json()
        except ValueError as e:
            raise RegistryError(
                code=RegistryErrorCode.PARSE_ERROR.value,
                message=f"Registry returned invalid JSON: {e}",
                details={"url": url},
            )

    @staticmethod
    def _to_record(data) -> DomainRecord:
        try:
            return DomainRecord.from_dict(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise RegistryError(
                code=RegistryErrorCode.PARSE_ERROR.value,
                message=f"Registry returned an invalid domain object: {e}",
            )
