"""Node.js package.json / yarn.lock parser."""

import json
from typing import Dict, List, Optional

from .base import BaseParser, Lockfile, Manifest

PACKAGE_JSON_SECTIONS = ("dependencies", "devDependencies")


class YarnLockTokenizer:
    """Line-oriented reader for the yarn.lock v1 format.

    Entries look like::

        "@babel/core@^7.0.0", "@babel/core@^7.1.0":
          version "7.1.2"
          resolved "https://..."

    A header starts at column 0; only its first ``name@range`` is used. The
    next non-blank line must be the indented ``version`` line.
    """

    def tokenize(self, content: str) -> Dict[str, str]:
        """Extract ``name -> locked version token`` pairs.

        The token keeps its opening quote (``'"7.1.2'``), which the parser's
        ``locked_prefix_length`` removes when joining.
        """
        lines = content.split("\n")
        entries: Dict[str, str] = {}

        for index, line in enumerate(lines):
            name = self._header_name(line)
            if name is None:
                continue

            version = self._version_after(lines, index)
            if version is not None:
                entries[name] = version

        return entries

    def _header_name(self, line: str) -> Optional[str]:
        if not line.strip() or line.startswith("#") or line[0].isspace():
            return None

        first = line.rstrip().rstrip(":").split(",")[0].strip().replace('"', "")
        separator = first.rfind("@")
        # A leading "@" belongs to a scope, not a range
        if separator <= 0:
            return None
        return first[:separator]

    def _version_after(self, lines: List[str], index: int) -> Optional[str]:
        for line in lines[index + 1:]:
            if not line.strip():
                continue
            stripped = line.strip()
            if not line[0].isspace() or not stripped.startswith("version"):
                return None

            left = stripped.find('"')
            right = stripped.rfind('"')
            if left == -1 or right <= left + 1:
                return None
            return stripped[left:right]
        return None


class PackageJsonParser(BaseParser):
    """Parser for package.json manifests paired with yarn.lock."""

    manifest_name = "package.json"
    lockfile_name = "yarn.lock"
    ecosystem = "nodejs"
    parser_type = "package"
    # npm reads "1.2.3" as exactly that version
    bare_operator = "="
    locked_prefix_length = 1
    line_substrings = ('"{name}": "',)

    def __init__(self, tokenizer: Optional[YarnLockTokenizer] = None) -> None:
        super().__init__()
        self.tokenizer = tokenizer or YarnLockTokenizer()

    def parse_manifest(self, manifest_text: str) -> Manifest:
        try:
            data = json.loads(manifest_text)
        except json.JSONDecodeError as e:
            raise self._error(str(e)) from e

        if not isinstance(data, dict):
            raise self._error("top level must be an object")

        manifest = Manifest()
        for section in PACKAGE_JSON_SECTIONS:
            table = data.get(section, {})
            if not isinstance(table, dict):
                raise self._error(f'"{section}" must be an object')

            for name, requirement in table.items():
                if not isinstance(requirement, str):
                    raise self._error(f'requirement for "{name}" in "{section}" must be a string')
                manifest.add(name, requirement, section)

        return manifest

    def parse_lockfile(self, lockfile_text: str) -> Lockfile:
        return Lockfile(dependencies=self.tokenizer.tokenize(lockfile_text))
