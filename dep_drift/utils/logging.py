"""Logging utilities for DepDrift."""

import logging
import sys
from pathlib import Path
from typing import Optional, Any
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

ROOT_LOGGER = "dep_drift"

LOG_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "critical": "red bold",
    "debug": "dim",
})


class DepDriftLogger:
    """Logger with rich formatting.

    Module loggers propagate to the ``dep_drift`` package logger, which owns
    the single rich handler. It writes to stderr so stdout stays free for
    annotations and JSON output.
    """

    def __init__(self, name: str, level: Optional[int] = None) -> None:
        self.logger = logging.getLogger(name)
        if level is not None:
            self.logger.setLevel(level)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Attach the rich console handler to the package logger once."""
        package_logger = logging.getLogger(ROOT_LOGGER)
        if any(isinstance(h, RichHandler) for h in package_logger.handlers):
            return

        handler = RichHandler(
            console=Console(theme=LOG_THEME, stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter(fmt="%(name)s: %(message)s", datefmt="[%X]"))

        package_logger.addHandler(handler)
        package_logger.propagate = False

    def set_level(self, level: int) -> None:
        """Change the level of the wrapped logger."""
        self.logger.setLevel(level)

    def info(self, msg: str, **kwargs: Any) -> None:
        self.logger.info(msg, extra=kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self.logger.warning(msg, extra=kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self.logger.error(msg, extra=kwargs)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self.logger.debug(msg, extra=kwargs)


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    verbose: bool = False
) -> None:
    """Configure logging for DepDrift.

    Args:
        level: Logging level for the ``dep_drift`` loggers
        log_file: Optional file receiving a plain-text copy of the log
        verbose: Shortcut for ``level=logging.DEBUG``
    """
    if verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Module loggers inherit their effective level from the package logger
    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel(level)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        package_logger.addHandler(file_handler)

    # Transport libraries are noisy at debug level
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> DepDriftLogger:
    """Get a DepDrift logger.

    Args:
        name: Logger name, usually the module's ``__name__``

    Returns:
        Configured logger instance
    """
    return DepDriftLogger(name)
