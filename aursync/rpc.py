"""AUR RPC client: the remote package-information provider."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import requests

from .errors import ProviderError, UnrecognizedField

RPC_VERSION = 5

# Names per info request; keeps the query string under common URL limits
INFO_CHUNK_SIZE = 150

SEARCH_FIELDS = (
    "name",
    "name-desc",
    "maintainer",
    "depends",
    "makedepends",
    "optdepends",
    "checkdepends",
)


@dataclass(frozen=True)
class Package:
    """Remote metadata record of an AUR package."""
    name: str
    version: str
    maintainer: Optional[str] = None
    num_votes: int = 0
    popularity: float = 0.0
    first_submitted: int = 0
    last_modified: int = 0
    out_of_date: Optional[int] = None
    url: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "Package":
        """Build a Package from one entry of an RPC ``results`` list."""
        return cls(
            name=data["Name"],
            version=data["Version"],
            maintainer=data.get("Maintainer"),
            num_votes=int(data.get("NumVotes") or 0),
            popularity=float(data.get("Popularity") or 0.0),
            first_submitted=int(data.get("FirstSubmitted") or 0),
            last_modified=int(data.get("LastModified") or 0),
            out_of_date=data.get("OutOfDate"),
            url=data.get("URL"),
            description=data.get("Description"),
        )


def parse_field(value: str) -> str:
    """
    Validate a search field name.

    Raises:
        UnrecognizedField: the field is not supported by the RPC
    """
    field = value.lower()
    if field not in SEARCH_FIELDS:
        raise UnrecognizedField(value)
    return field


class AurRpcClient:
    """Queries package metadata from the AUR RPC interface."""

    def __init__(self, base_url: str, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logging.getLogger('aursync.rpc')

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rpc/"

    def _get(self, params: Dict[str, Any], context: str) -> List[Dict[str, Any]]:
        params = {"v": RPC_VERSION, **params}
        self.logger.debug(f"RPC {context} request: {params}")

        try:
            response = self.session.get(self.endpoint, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as e:
            raise ProviderError(f"AUR {context} request timed out after {self.timeout} seconds") from e
        except requests.RequestException as e:
            raise ProviderError(f"AUR {context} request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"AUR {context} returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ProviderError(f"AUR {context} returned an unexpected payload: {type(payload).__name__}")

        if payload.get("type") == "error":
            raise ProviderError(f"AUR {context} error: {payload.get('error', 'unknown error')}")

        return payload.get("results") or []

    def info(self, names: Iterable[str]) -> Dict[str, Package]:
        """
        Fetch metadata for the named packages.

        Names unknown to the AUR are simply absent from the result.

        Args:
            names: Package names

        Returns:
            Dictionary mapping package name to Package
        """
        names = list(dict.fromkeys(names))
        packages: Dict[str, Package] = {}

        for start in range(0, len(names), INFO_CHUNK_SIZE):
            chunk = names[start:start + INFO_CHUNK_SIZE]
            for entry in self._get({"type": "info", "arg[]": chunk}, "info"):
                package = Package.from_rpc(entry)
                packages[package.name] = package

        missing = [name for name in names if name not in packages]
        if missing:
            self.logger.debug(f"Not found in the AUR: {missing}")

        return packages

    def search(self, keywords: str, by: str = "name-desc") -> List[Package]:
        """
        Search packages by keyword in the given field.

        Raises:
            UnrecognizedField: ``by`` is not a supported search field
            ProviderError: the request failed
        """
        field = parse_field(by)
        self.logger.info(f"Searching {field} :: {keywords}")
        results = self._get({"type": "search", "by": field, "arg": keywords}, "search")
        return [Package.from_rpc(entry) for entry in results]
