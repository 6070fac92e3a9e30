"""Package registry clients for DepDrift."""

from .base import JsonFetcher, RegistryClient, VERSION_NOT_FOUND, extract_path
from .clients import crates_io_client, pypi_client, npm_client, get_registry_client, all_clients
from .http import AiohttpFetcher

__all__ = [
    "JsonFetcher",
    "RegistryClient",
    "VERSION_NOT_FOUND",
    "extract_path",
    "crates_io_client",
    "pypi_client",
    "npm_client",
    "get_registry_client",
    "all_clients",
    "AiohttpFetcher",
]
