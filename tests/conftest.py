"""Shared fixtures for DepDrift tests."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from dep_drift.errors import FetchError
from dep_drift.registries import JsonFetcher


class FakeFetcher(JsonFetcher):
    """In-memory registry transport.

    ``documents`` maps URLs to JSON bodies; URLs that are missing raise
    FetchError like an HTTP 404 would.
    """

    def __init__(self, documents: Optional[Dict[str, Any]] = None, config: Any = None) -> None:
        self.documents = dict(documents or {})
        self.config = config
        self.requests: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_json(self, url: str, package: str = "") -> Any:
        self.requests.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if url not in self.documents:
                raise FetchError(package, url, "HTTP 404")
            return self.documents[url]
        finally:
            self.in_flight -= 1

    async def __aenter__(self) -> "FakeFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None


def crate(name: str, version: str) -> Dict[str, Any]:
    """crates.io document entry for ``name``."""
    return {f"https://crates.io/api/v1/crates/{name}": {"crate": {"id": name, "max_version": version}}}


@pytest.fixture
def fake_fetcher():
    """Fetcher with no documents; tests add their own."""
    return FakeFetcher()
