"""aiohttp transport for registry clients."""

import asyncio
import ssl
from typing import Any, Optional

import aiohttp
import certifi
from aiohttp import ClientTimeout

from ..config import DriftConfig
from ..errors import FetchError
from ..utils.logging import get_logger
from .base import JsonFetcher


class AiohttpFetcher(JsonFetcher):
    """Fetches JSON documents over HTTPS with a shared aiohttp session."""

    def __init__(
        self,
        config: Optional[DriftConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Timeout and user agent settings
            session: Optional aiohttp session for connection reuse
        """
        self.config = config or DriftConfig()
        self.logger = get_logger(__name__)
        self._session = session
        self._owns_session = session is None
        self._ssl_context = ssl.create_default_context(cafile=certifi.where())

    async def __aenter__(self) -> "AiohttpFetcher":
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the session if this fetcher created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if not self._session or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=ClientTimeout(total=self.config.request_timeout),
                connector=aiohttp.TCPConnector(ssl=self._ssl_context),
                headers={
                    "User-Agent": self.config.user_agent,
                    "Accept": "application/json",
                },
            )
            self._owns_session = True
        return self._session

    async def fetch_json(self, url: str, package: str = "") -> Any:
        """GET ``url`` and decode the body as JSON.

        Raises:
            FetchError: On connection errors, timeouts, HTTP status >= 400
                or a body that is not JSON
        """
        self.logger.debug(f"GET {url}")
        try:
            async with self._get_session().get(url) as response:
                if response.status >= 400:
                    raise FetchError(package, url, f"HTTP {response.status}")
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise FetchError(package, url, str(e) or type(e).__name__) from e
        except asyncio.TimeoutError as e:
            raise FetchError(package, url, "request timed out") from e
        except ValueError as e:
            # undecodable bytes or malformed JSON
            raise FetchError(package, url, f"invalid JSON: {e}") from e
