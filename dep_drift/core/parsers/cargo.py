"""Rust Cargo.toml / Cargo.lock parser."""

from typing import Any, Dict

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from .base import BaseParser, Lockfile, Manifest, table_requirement

CARGO_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")


class CargoParser(BaseParser):
    """Parser for Cargo.toml manifests paired with Cargo.lock."""

    manifest_name = "Cargo.toml"
    lockfile_name = "Cargo.lock"
    ecosystem = "rust"
    parser_type = "cargo"
    # Cargo reads "1.2.3" as "^1.2.3"
    bare_operator = "^"
    locked_prefix_length = 0
    line_prefixes = ("{name} = ",)

    def parse_manifest(self, manifest_text: str) -> Manifest:
        try:
            data = tomllib.loads(manifest_text)
        except tomllib.TOMLDecodeError as e:
            raise self._error(str(e)) from e

        manifest = Manifest()
        for section in CARGO_SECTIONS:
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
        data: Dict[str, Any] = tomllib.loads(lockfile_text)

        lockfile = Lockfile()
        for package in data.get("package", []):
            name = package.get("name")
            version = package.get("version")
            if isinstance(name, str) and isinstance(version, str):
                lockfile.dependencies[name] = version

        return lockfile
