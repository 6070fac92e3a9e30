"""Python Pipfile / Pipfile.lock parser."""

import json
from typing import Any, Dict

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from .base import BaseParser, Lockfile, Manifest, table_requirement

PIPFILE_SECTIONS = ("packages", "dev-packages")
PIPFILE_LOCK_SECTIONS = ("default", "develop")


class PipfileParser(BaseParser):
    """Parser for Pipfile manifests paired with Pipfile.lock.

    Locked versions are stored with their operator (``"==1.0.3"``); the two
    operator characters are dropped when joining.
    """

    manifest_name = "Pipfile"
    lockfile_name = "Pipfile.lock"
    ecosystem = "python"
    parser_type = "pipfile"
    bare_operator = "=="
    locked_prefix_length = 2
    line_prefixes = ("{name} = ", '"{name}" = ')

    def parse_manifest(self, manifest_text: str) -> Manifest:
        try:
            data = tomllib.loads(manifest_text)
        except tomllib.TOMLDecodeError as e:
            raise self._error(str(e)) from e

        manifest = Manifest()
        for section in PIPFILE_SECTIONS:
            table = data.get(section, {})
            if not isinstance(table, dict):
                raise self._error(f"[{section}] must be a table")

            for name, spec in table.items():
                requirement = table_requirement(spec)
                if requirement is None:
                    raise self._error(f"unsupported requirement for {name!r} in [{section}]")
                manifest.add(name, requirement, section)

        return manifest

    def parse_lockfile(self, lockfile_text: str) -> Lockfile:
        data: Dict[str, Any] = json.loads(lockfile_text)

        lockfile = Lockfile()
        for section in PIPFILE_LOCK_SECTIONS:
            for name, entry in data.get(section, {}).items():
                # VCS and path pins carry no version
                version = entry.get("version") if isinstance(entry, dict) else None
                if isinstance(version, str):
                    lockfile.dependencies[name] = version

        return lockfile
