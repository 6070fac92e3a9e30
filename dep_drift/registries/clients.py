"""Registry clients for crates.io, PyPI and npm."""

from typing import Dict, Optional

from .base import JsonFetcher, RegistryClient

CRATES_IO_URL = "https://crates.io/api/v1/crates/{package}"
PYPI_URL = "https://pypi.org/pypi/{package}/json"
NPM_URL = "https://registry.npmjs.org/{package}"


def crates_io_client(fetcher: Optional[JsonFetcher] = None) -> RegistryClient:
    return RegistryClient("crates.io", CRATES_IO_URL, ("crate", "max_version"), fetcher)


def pypi_client(fetcher: Optional[JsonFetcher] = None) -> RegistryClient:
    return RegistryClient("pypi", PYPI_URL, ("info", "version"), fetcher)


def npm_client(fetcher: Optional[JsonFetcher] = None) -> RegistryClient:
    return RegistryClient("npm", NPM_URL, ("dist-tags", "latest"), fetcher)


# Ecosystem name (as used by the parsers) -> client factory
CLIENT_FACTORIES = {
    "rust": crates_io_client,
    "python": pypi_client,
    "nodejs": npm_client,
}


def get_registry_client(ecosystem: str, fetcher: Optional[JsonFetcher] = None) -> RegistryClient:
    """Build the registry client for an ecosystem.

    Raises:
        ValueError: If the ecosystem has no registry
    """
    factory = CLIENT_FACTORIES.get(ecosystem)
    if factory is None:
        raise ValueError(f"No registry for ecosystem: {ecosystem}")
    return factory(fetcher)


def all_clients(fetcher: Optional[JsonFetcher] = None) -> Dict[str, RegistryClient]:
    return {ecosystem: factory(fetcher) for ecosystem, factory in CLIENT_FACTORIES.items()}
