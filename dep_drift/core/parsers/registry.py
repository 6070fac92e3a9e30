"""Registry of manifest dialect parsers."""

from pathlib import Path
from typing import Dict, List, Optional

from .base import BaseParser


class ParserRegistry:
    """Looks up dialect parsers by ecosystem or manifest file name."""

    def __init__(self) -> None:
        """Initialize the parser registry."""
        self._parsers: Dict[str, BaseParser] = {}

    def register(self, parser: BaseParser) -> None:
        """Register a parser under its ecosystem.

        Args:
            parser: Parser instance to register

        Raises:
            ValueError: If the ecosystem already has a parser
        """
        if parser.ecosystem in self._parsers:
            raise ValueError(f"Parser already registered for ecosystem: {parser.ecosystem}")
        self._parsers[parser.ecosystem] = parser

    def get_parser(self, ecosystem: str) -> Optional[BaseParser]:
        """Get the parser for an ecosystem, or None."""
        return self._parsers.get(ecosystem)

    def find_parser_for_file(self, file_path: Path) -> Optional[BaseParser]:
        """Find the parser whose manifest name matches the file.

        Args:
            file_path: Path to a manifest

        Returns:
            Parser that can handle the file or None
        """
        for parser in self._parsers.values():
            if parser.can_parse(file_path.name):
                return parser
        return None

    def lockfile_for(self, manifest_path: Path) -> Optional[Path]:
        """Path of the lockfile that sits next to a manifest."""
        parser = self.find_parser_for_file(manifest_path)
        if parser is None:
            return None
        return manifest_path.with_name(parser.lockfile_name)

    def get_supported_ecosystems(self) -> List[str]:
        return list(self._parsers.keys())

    def get_manifest_names(self) -> List[str]:
        return [parser.manifest_name for parser in self._parsers.values()]

    def __iter__(self):
        return iter(self._parsers.values())
