"""Registry client shared by all package registries."""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence
from urllib.parse import quote

from ..errors import FetchError
from ..utils.logging import get_logger
from ..utils.performance import benchmark

VERSION_NOT_FOUND = "version not found"


class JsonFetcher(ABC):
    """Transport used by registry clients: GET a URL and decode its JSON body.

    Implementations raise :class:`~dep_drift.errors.FetchError` on any
    transport, HTTP status or decoding failure.
    """

    @abstractmethod
    async def fetch_json(self, url: str, package: str = "") -> Any:
        """Return the decoded JSON body at ``url``; ``package`` is for errors."""


class RegistryClient:
    """Queries one registry for the latest published version of a package.

    Every registry follows the same recipe: substitute the package name into
    a URL template, fetch JSON, and read the latest version from a fixed
    path in the response. Only the template and the path differ.
    """

    PLACEHOLDER = "{package}"

    def __init__(
        self,
        name: str,
        url_template: str,
        version_path: Sequence[str],
        fetcher: Optional[JsonFetcher] = None
    ) -> None:
        """Initialize the client.

        Args:
            name: Display name of the registry
            url_template: URL containing a ``{package}`` placeholder
            version_path: Keys leading to the latest version in the response
            fetcher: Transport performing the GET requests
        """
        if self.PLACEHOLDER not in url_template:
            raise ValueError(f"URL template has no {self.PLACEHOLDER} placeholder: {url_template}")
        if not version_path:
            raise ValueError("Version path cannot be empty")

        self.name = name
        self.url_template = url_template
        self.version_path = tuple(version_path)
        self.fetcher = fetcher
        self.logger = get_logger(__name__)

    def url_for(self, package: str) -> str:
        # Scoped npm names keep their "@" but must encode the "/"
        return self.url_template.replace(self.PLACEHOLDER, quote(package, safe="@"))

    async def get_package_info(self, package: str) -> Any:
        """Fetch the registry's JSON document for a package.

        Raises:
            FetchError: On transport or decoding failure
        """
        if self.fetcher is None:
            raise FetchError(package, self.url_for(package), "no transport configured")
        return await self.fetcher.fetch_json(self.url_for(package), package)

    @benchmark
    async def get_max_version(self, package: str) -> str:
        """Latest published version of a package.

        Returns:
            The version string, or ``VERSION_NOT_FOUND`` when the response
            does not carry one at the expected path

        Raises:
            FetchError: On transport or decoding failure
        """
        body = await self.get_package_info(package)
        version = extract_path(body, self.version_path)
        if not isinstance(version, str):
            self.logger.debug(f"{self.name}: no version at {'.'.join(self.version_path)} for {package}")
            return VERSION_NOT_FOUND
        return version

    def __repr__(self) -> str:
        return f"RegistryClient(name={self.name!r}, url_template={self.url_template!r})"


def extract_path(document: Any, path: Sequence[str]) -> Any:
    """Follow ``path`` through nested dictionaries, returning None if it breaks."""
    current = document
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current
