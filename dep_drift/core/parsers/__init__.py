"""Manifest and lockfile parsers for the supported ecosystems."""

from .base import BaseParser, DependencyRecord, Lockfile, Manifest, UNRESOLVED_DISPLAY
from .cargo import CargoParser
from .python import PipfileParser
from .nodejs import PackageJsonParser, YarnLockTokenizer
from .registry import ParserRegistry

# Register built-in parsers
registry = ParserRegistry()
registry.register(CargoParser())
registry.register(PipfileParser())
registry.register(PackageJsonParser())

# Convenience exports
DependencyParser = registry
__all__ = [
    "BaseParser",
    "DependencyRecord",
    "Lockfile",
    "Manifest",
    "UNRESOLVED_DISPLAY",
    "CargoParser",
    "PipfileParser",
    "PackageJsonParser",
    "YarnLockTokenizer",
    "ParserRegistry",
    "DependencyParser",
    "registry",
]
