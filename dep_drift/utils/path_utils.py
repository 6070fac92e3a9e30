"""Path utilities for finding manifests and reading their lockfiles."""

import fnmatch
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

DEFAULT_IGNORE_PATTERNS = [
    "**/node_modules/**",
    "**/.git/**",
    "**/__pycache__/**",
    "**/.venv/**",
    "**/venv/**",
    "**/target/**",
    "**/dist/**",
    "**/build/**",
    "**/.pytest_cache/**",
]


class PathFilter:
    """Filters paths based on glob patterns."""

    def __init__(self, ignore_patterns: Optional[List[str]] = None) -> None:
        """Initialize path filter.

        Args:
            ignore_patterns: Extra glob patterns, added to the defaults
        """
        self.ignore_patterns = DEFAULT_IGNORE_PATTERNS + list(ignore_patterns or [])

    def is_ignored(self, path: Path) -> bool:
        """Check if a path should be ignored.

        Args:
            path: Path to check

        Returns:
            True if path matches any ignore pattern
        """
        path_str = path.as_posix()
        return any(fnmatch.fnmatch(path_str, pattern) for pattern in self.ignore_patterns)

    def filter_paths(self, paths: Iterable[Path]) -> Iterator[Path]:
        for path in paths:
            if not self.is_ignored(path):
                yield path


def find_manifest_files(
    root_path: Path,
    manifest_names: Iterable[str],
    ignore_patterns: Optional[List[str]] = None
) -> List[Path]:
    """Find manifests below a directory, or accept a single manifest file.

    Args:
        root_path: Directory to search recursively, or a manifest file
        manifest_names: File names recognised as manifests
        ignore_patterns: Additional ignore patterns

    Returns:
        Sorted list of manifest paths

    Raises:
        ValueError: If the path does not exist or is an unsupported file
    """
    names = set(manifest_names)

    if not root_path.exists():
        raise ValueError(f"Path does not exist: {root_path}")

    if root_path.is_file():
        if root_path.name not in names:
            raise ValueError(f"Not a supported manifest: {root_path.name}")
        return [root_path]

    path_filter = PathFilter(ignore_patterns)
    candidates = (p for p in root_path.rglob("*") if p.name in names and p.is_file())
    return sorted(path_filter.filter_paths(candidates))


def read_text_or_empty(path: Path) -> str:
    """Read a UTF-8 file, returning an empty string when it is absent.

    An empty string is how an absent lockfile is signalled to the parsers.
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""
