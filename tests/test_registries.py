"""Tests for registry clients and the HTTP transport."""

import asyncio
import json
import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from dep_drift.config import DriftConfig
from dep_drift.core.classifier import Severity
from dep_drift.core.parsers import CargoParser
from dep_drift.core.pipeline import DriftPipeline, EcosystemContext
from dep_drift.errors import FetchError
from dep_drift.registries import (
    AiohttpFetcher,
    RegistryClient,
    VERSION_NOT_FOUND,
    all_clients,
    crates_io_client,
    extract_path,
    get_registry_client,
    npm_client,
    pypi_client,
)

from conftest import FakeFetcher


class TestRegistryClients:
    """Test latest-version extraction per registry."""

    def test_crates_io(self):
        """Test reading crate.max_version."""
        fetcher = FakeFetcher({
            "https://crates.io/api/v1/crates/serde": {"crate": {"max_version": "1.0.190"}},
        })
        client = crates_io_client(fetcher)

        assert asyncio.run(client.get_max_version("serde")) == "1.0.190"
        assert fetcher.requests == ["https://crates.io/api/v1/crates/serde"]

    def test_pypi(self):
        """Test reading info.version."""
        fetcher = FakeFetcher({
            "https://pypi.org/pypi/requests/json": {"info": {"version": "2.31.0"}, "releases": {}},
        })

        assert asyncio.run(pypi_client(fetcher).get_max_version("requests")) == "2.31.0"

    def test_npm_scoped_package(self):
        """Test reading dist-tags.latest for a scoped name."""
        fetcher = FakeFetcher({
            "https://registry.npmjs.org/@babel%2Fcore": {"dist-tags": {"latest": "7.23.2"}},
        })

        assert asyncio.run(npm_client(fetcher).get_max_version("@babel/core")) == "7.23.2"

    @pytest.mark.parametrize("body", [
        {},
        {"crate": {}},
        {"crate": {"max_version": 3}},
        {"crate": "serde"},
        [],
    ])
    def test_missing_version(self, body):
        """Test that responses without a version give the sentinel."""
        fetcher = FakeFetcher({"https://crates.io/api/v1/crates/serde": body})

        assert asyncio.run(crates_io_client(fetcher).get_max_version("serde")) == VERSION_NOT_FOUND

    def test_fetch_error_propagates(self):
        """Test that transport failures are raised to the caller."""
        client = crates_io_client(FakeFetcher())

        with pytest.raises(FetchError) as exc_info:
            asyncio.run(client.get_max_version("serde"))

        assert exc_info.value.package == "serde"
        assert exc_info.value.url == "https://crates.io/api/v1/crates/serde"

    def test_no_transport(self):
        """Test that a client without a fetcher fails cleanly."""
        with pytest.raises(FetchError):
            asyncio.run(pypi_client().get_package_info("requests"))

    def test_invalid_client_configuration(self):
        """Test constructor validation."""
        with pytest.raises(ValueError):
            RegistryClient("x", "https://example.com/", ("version",))
        with pytest.raises(ValueError):
            RegistryClient("x", "https://example.com/{package}", ())

    def test_client_lookup(self):
        """Test selecting clients by ecosystem."""
        assert get_registry_client("rust").name == "crates.io"
        assert get_registry_client("python").name == "pypi"
        assert get_registry_client("nodejs").name == "npm"
        assert set(all_clients()) == {"rust", "python", "nodejs"}

        with pytest.raises(ValueError):
            get_registry_client("go")

    def test_extract_path(self):
        """Test nested key lookup."""
        assert extract_path({"a": {"b": "c"}}, ("a", "b")) == "c"
        assert extract_path({"a": "b"}, ("a", "b")) is None
        assert extract_path(None, ("a",)) is None


def _session_returning(status=200, body=b"{}"):
    """Mock aiohttp session whose get() yields one response.

    The response decodes ``body`` as UTF-8 JSON the way aiohttp does.
    """
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(side_effect=lambda **kwargs: json.loads(body.decode("utf-8")))

    session = MagicMock()
    session.closed = False
    session.get.return_value.__aenter__ = AsyncMock(return_value=response)
    session.get.return_value.__aexit__ = AsyncMock(return_value=False)
    session.close = AsyncMock()
    return session


class TestAiohttpFetcher:
    """Test the aiohttp transport with a mocked session."""

    def test_fetch_json(self):
        """Test decoding a successful response."""
        session = _session_returning(body=b'{"info": {"version": "2.31.0"}}')
        fetcher = AiohttpFetcher(session=session)

        body = asyncio.run(fetcher.fetch_json("https://pypi.org/pypi/requests/json", "requests"))

        assert body == {"info": {"version": "2.31.0"}}
        session.get.assert_called_once_with("https://pypi.org/pypi/requests/json")

    def test_http_error_status(self):
        """Test that 4xx/5xx responses raise FetchError."""
        fetcher = AiohttpFetcher(session=_session_returning(status=404))

        with pytest.raises(FetchError, match="HTTP 404"):
            asyncio.run(fetcher.fetch_json("https://crates.io/api/v1/crates/nope", "nope"))

    def test_invalid_json(self):
        """Test that a non-JSON body raises FetchError."""
        fetcher = AiohttpFetcher(session=_session_returning(body=b"<html>"))

        with pytest.raises(FetchError, match="invalid JSON"):
            asyncio.run(fetcher.fetch_json("https://registry.npmjs.org/x", "x"))

    def test_undecodable_body(self):
        """Test that a body which is not UTF-8 raises FetchError."""
        session = _session_returning(body=b'{"crate": {"max_version": "\xff\xfe"}}')
        fetcher = AiohttpFetcher(session=session)

        with pytest.raises(FetchError, match="invalid JSON"):
            asyncio.run(fetcher.fetch_json("https://crates.io/api/v1/crates/bad", "bad"))

    def test_undecodable_body_only_fails_its_dependency(self):
        """Test that one undecodable response leaves the other lookups intact."""
        good = _session_returning(body=b'{"crate": {"max_version": "1.3.0"}}').get.return_value
        bad = _session_returning(body=b"\xff\xfe").get.return_value
        session = _session_returning()
        session.get.side_effect = lambda url: bad if url.endswith("/bad") else good
        context = EcosystemContext.create(CargoParser(), AiohttpFetcher(session=session))
        manifest = '[dependencies]\ngood = "1.2.0"\nbad = "1.0"\n'
        lockfile = '[[package]]\nname = "good"\nversion = "1.2.0"\n'

        good_dep, bad_dep = asyncio.run(DriftPipeline().analyze(manifest, lockfile, context))

        assert good_dep.drift.severity is Severity.MINOR
        assert bad_dep.drift is None
        assert "invalid JSON" in bad_dep.error
        assert "bad" not in context.cache

    def test_connection_error(self):
        """Test that aiohttp client errors become FetchError."""
        session = _session_returning()
        session.get.side_effect = aiohttp.ClientConnectionError("connection refused")
        fetcher = AiohttpFetcher(session=session)

        with pytest.raises(FetchError, match="connection refused"):
            asyncio.run(fetcher.fetch_json("https://crates.io/api/v1/crates/serde", "serde"))

    def test_timeout(self):
        """Test that timeouts become FetchError."""
        session = _session_returning()
        session.get.side_effect = asyncio.TimeoutError()
        fetcher = AiohttpFetcher(session=session)

        with pytest.raises(FetchError, match="timed out"):
            asyncio.run(fetcher.fetch_json("https://crates.io/api/v1/crates/serde", "serde"))

    def test_close_leaves_injected_session_open(self):
        """Test that only self-created sessions are closed."""
        session = _session_returning()
        fetcher = AiohttpFetcher(session=session)

        asyncio.run(fetcher.close())

        session.close.assert_not_awaited()

    def test_uses_config(self):
        """Test that the configuration is kept for new sessions."""
        config = DriftConfig(request_timeout=5.0, user_agent="tests/1.0")
        fetcher = AiohttpFetcher(config)

        assert fetcher.config.request_timeout == 5.0
        assert fetcher.config.user_agent == "tests/1.0"
