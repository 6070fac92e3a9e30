"""Base parser class and data models for manifest and lockfile parsing."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ...errors import ParseError
from ...utils.logging import get_logger

UNRESOLVED_DISPLAY = "--"


@dataclass(frozen=True)
class DependencyRecord:
    """A declared dependency joined with its locked version."""

    name: str
    requirement: str
    resolved_current: Optional[str] = None
    source_line: int = 0
    section: str = ""

    def __post_init__(self) -> None:
        """Validate the record."""
        if not self.name:
            raise ValueError("Dependency name cannot be empty")
        if self.source_line < 0:
            raise ValueError(f"Source line cannot be negative: {self.source_line}")

    @property
    def is_resolved(self) -> bool:
        """True when the lockfile pinned a version for this dependency."""
        return self.resolved_current is not None

    @property
    def current_display(self) -> str:
        """Locked version, or the unresolved marker."""
        return self.resolved_current if self.resolved_current is not None else UNRESOLVED_DISPLAY


@dataclass
class Manifest:
    """Declared dependencies in file order, all sections concatenated.

    Names are not required to be unique: a package listed in both the runtime
    and the development section appears twice.
    """

    dependencies: List[Tuple[str, str, str]] = field(default_factory=list)

    def add(self, name: str, requirement: str, section: str = "") -> None:
        """Append a ``(name, requirement, section)`` declaration."""
        self.dependencies.append((name, requirement, section))

    def get_dependency_names(self) -> Set[str]:
        return {name for name, _, _ in self.dependencies}

    def __len__(self) -> int:
        return len(self.dependencies)


@dataclass
class Lockfile:
    """Locked versions keyed by package name; later entries overwrite earlier ones."""

    dependencies: Dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> Optional[str]:
        return self.dependencies.get(name)

    def __len__(self) -> int:
        return len(self.dependencies)


class BaseParser(ABC):
    """Abstract base class for manifest dialects.

    Subclasses parse the manifest and lockfile formats; this class joins them
    into :class:`DependencyRecord` objects and locates declaration lines.
    """

    # Shown in error messages and used to pair manifests with lockfiles
    manifest_name: str = ""
    lockfile_name: str = ""
    ecosystem: str = ""
    parser_type: str = ""
    # Operator applied to a requirement with no operator (e.g. "1.2.0")
    bare_operator: str = "^"
    # Characters to drop from the front of a locked version string
    locked_prefix_length: int = 0
    # Declaration tokens with a ``{name}`` placeholder
    line_prefixes: Tuple[str, ...] = ()
    line_substrings: Tuple[str, ...] = ()

    def __init__(self) -> None:
        """Initialize the parser."""
        self.logger = get_logger(f"{__name__}.{type(self).__name__}")

    @abstractmethod
    def parse_manifest(self, manifest_text: str) -> Manifest:
        """Parse manifest text.

        Args:
            manifest_text: Raw manifest content

        Returns:
            Declared dependencies

        Raises:
            ParseError: If the manifest is malformed
        """

    @abstractmethod
    def parse_lockfile(self, lockfile_text: str) -> Lockfile:
        """Parse lockfile text.

        Args:
            lockfile_text: Raw lockfile content

        Returns:
            Locked versions

        Raises:
            Exception: Any failure; :meth:`load_lockfile` absorbs it
        """

    def can_parse(self, file_name: str) -> bool:
        """Check if this parser handles the given manifest file name."""
        return file_name == self.manifest_name

    def load_lockfile(self, lockfile_text: str) -> Lockfile:
        """Parse lockfile text, degrading to an empty lockfile on any failure.

        An empty string means no lockfile is present.
        """
        if not lockfile_text.strip():
            return Lockfile()

        try:
            return self.parse_lockfile(lockfile_text)
        except Exception as e:
            self.logger.debug(f"Ignoring unreadable {self.lockfile_name}: {e}")
            return Lockfile()

    def get_dependencies(self, manifest_text: str, lockfile_text: str) -> List[DependencyRecord]:
        """Join manifest declarations with locked versions.

        Args:
            manifest_text: Raw manifest content
            lockfile_text: Raw lockfile content, empty when absent

        Returns:
            One record per declaration, in manifest order

        Raises:
            ParseError: If the manifest is malformed
        """
        manifest = self.parse_manifest(manifest_text)
        lockfile = self.load_lockfile(lockfile_text)
        lines = manifest_text.split("\n")

        records = []
        for name, requirement, section in manifest.dependencies:
            records.append(DependencyRecord(
                name=name,
                requirement=requirement,
                resolved_current=self._resolve_locked(lockfile.get(name)),
                source_line=self.find_source_line(lines, name),
                section=section,
            ))

        self.logger.debug(
            f"{self.manifest_name}: {len(records)} dependencies, {len(lockfile)} locked"
        )
        return records

    def find_source_line(self, lines: List[str], name: str) -> int:
        """Locate the line declaring ``name``.

        Lines are scanned in file order and the last match wins, so packages
        sharing a prefix can collide. Returns 0 when nothing matches.
        """
        prefixes = [p.format(name=name) for p in self.line_prefixes]
        substrings = [s.format(name=name) for s in self.line_substrings]

        line_number = 0
        for index, line in enumerate(lines):
            stripped = line.strip()
            if any(stripped.startswith(p) for p in prefixes) or any(s in line for s in substrings):
                line_number = index
        return line_number

    def _resolve_locked(self, locked: Optional[str]) -> Optional[str]:
        if locked is None:
            return None
        version = locked[self.locked_prefix_length:]
        return version or None

    def _error(self, message: str) -> ParseError:
        return ParseError(self.manifest_name, message)


def table_requirement(spec: object) -> Optional[str]:
    """Requirement string of a TOML dependency value.

    Strings are kept verbatim; tables yield their ``version`` key, or ``*``
    when they pin by git/path instead.
    """
    if isinstance(spec, str):
        return spec
    if isinstance(spec, dict):
        version = spec.get("version", "*")
        return version if isinstance(version, str) else None
    return None
