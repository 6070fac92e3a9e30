"""Runtime configuration for DepDrift."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from . import __version__

DEFAULT_CACHE_TTL = 30.0
DEFAULT_MAX_CONCURRENT = 10
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = f"dep-drift/{__version__}"


@dataclass
class DriftConfig:
    """Configuration shared by the pipeline, caches and registry transport."""

    cache_ttl: float = DEFAULT_CACHE_TTL
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    request_timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.cache_ttl < 0:
            raise ValueError(f"Cache TTL cannot be negative: {self.cache_ttl}")
        if self.max_concurrent < 1:
            raise ValueError(f"Concurrency must be at least 1: {self.max_concurrent}")
        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive: {self.request_timeout}")
        if not self.user_agent:
            raise ValueError("User agent cannot be empty")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DriftConfig":
        """Build a configuration from ``DEPDRIFT_*`` environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Configuration with environment overrides applied

        Raises:
            ValueError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ

        def _read(name: str, convert, default):
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return convert(raw.strip())
            except ValueError as e:
                raise ValueError(f"Invalid value for {name}: {raw!r}") from e

        return cls(
            cache_ttl=_read("DEPDRIFT_CACHE_TTL", float, DEFAULT_CACHE_TTL),
            max_concurrent=_read("DEPDRIFT_MAX_CONCURRENT", int, DEFAULT_MAX_CONCURRENT),
            request_timeout=_read("DEPDRIFT_TIMEOUT", float, DEFAULT_TIMEOUT),
            user_agent=env.get("DEPDRIFT_USER_AGENT") or DEFAULT_USER_AGENT,
        )
