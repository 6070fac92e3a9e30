"""Exception types raised by DepDrift."""

from typing import Optional


class DepDriftError(Exception):
    """Base class for all DepDrift errors."""


class ParseError(DepDriftError):
    """Raised when a manifest cannot be parsed.

    Fatal for the invocation that hit it: no partial results are produced.
    """

    def __init__(self, manifest_kind: str, message: str) -> None:
        self.manifest_kind = manifest_kind
        super().__init__(f"Invalid {manifest_kind}: {message}")


class FetchError(DepDriftError):
    """Raised when a registry lookup fails in transport or JSON decoding."""

    def __init__(self, package: str, url: str, reason: str) -> None:
        self.package = package
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {package} from {url}: {reason}")


def describe_error(error: Optional[BaseException]) -> str:
    """Short one-line description of an error for diagnostics."""
    if error is None:
        return ""
    message = str(error).strip()
    return message.splitlines()[0] if message else type(error).__name__
