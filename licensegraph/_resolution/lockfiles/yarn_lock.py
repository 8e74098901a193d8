"""Parser for yarn.lock files (Yarn classic and Yarn Berry)."""

from pathlib import Path
from typing import Any, Hashable, Optional

import yaml

from ...exceptions import ParseFailureError
from ..manifest import Manifest
from ..tree import TreeNode
from ..utils import split_package_key
from .common import LockedPackage, assemble_tree, string_map


class YarnLockParser:
    """Parser for yarn.lock files.

    Yarn classic (v1) uses its own line-oriented format. Every entry is keyed
    by all the ``name@range`` specifiers it satisfies:

        chai@^4.1.2:
          version "4.1.2"
          resolved "https://registry.yarnpkg.com/chai/-/chai-4.1.2.tgz#0f64584b..."
          dependencies:
            assertion-error "^1.0.1"
            deep-eql "^3.0.0"

        "@babel/code-frame@^7.0.0", "@babel/code-frame@^7.10.4":
          version "7.10.4"

    Yarn Berry (v2+) writes YAML with a ``__metadata`` block and
    protocol-qualified keys such as ``"chai@npm:^4.1.2"``.

    A requirement ``name@range`` is resolved by looking the specifier up as a
    key, so the lockfile itself does the range matching.
    """

    name = "yarn-lock"
    supported_files = ("yarn.lock",)

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def parse(self, lock_file_path: Path, manifest: Manifest) -> TreeNode:
        """Parse yarn.lock into a tree."""
        try:
            content = lock_file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ParseFailureError(f"Could not read {lock_file_path.name}: {e}") from e

        if "__metadata:" in content:
            entries = self._parse_berry(content)
        else:
            entries = self._parse_classic(content)

        def locate(parent: Optional[Hashable], name: str, spec: str) -> Optional[tuple[Hashable, LockedPackage]]:
            for key in (f"{name}@{spec}", f"{name}@npm:{spec}"):
                package = entries.get(key)
                if package is not None:
                    return id(package), package
            return None

        return assemble_tree(manifest, locate, lock_file_path.name)

    def _parse_classic(self, content: str) -> dict[str, LockedPackage]:
        """Parse Yarn classic lockfile content into specifier -> package."""
        entries: dict[str, LockedPackage] = {}
        fields: dict[str, Any] = {}
        keys: list[str] = []
        section: Optional[str] = None

        def flush() -> None:
            if not keys:
                return
            package = self._package(keys[0], fields)
            for key in keys:
                entries[key] = package

        for line_number, raw in enumerate(content.splitlines(), start=1):
            stripped = raw.strip()
            if not stripped or stripped.startswith("#"):
                continue

            indent = len(raw) - len(raw.lstrip(" "))
            if indent == 0:
                if not stripped.endswith(":"):
                    raise ParseFailureError(f"yarn.lock line {line_number}: expected an entry header")
                flush()
                keys = [_unquote(key.strip()) for key in stripped[:-1].split(",") if key.strip()]
                fields = {}
                section = None
            elif not keys:
                raise ParseFailureError(f"yarn.lock line {line_number}: field outside of an entry")
            elif indent <= 2:
                if stripped.endswith(":"):
                    section = _unquote(stripped[:-1])
                    fields[section] = {}
                else:
                    section = None
                    key, value = _split_field(stripped)
                    fields[key] = value
            elif section is not None:
                key, value = _split_field(stripped)
                fields[section][key] = value

        flush()
        return entries

    def _parse_berry(self, content: str) -> dict[str, LockedPackage]:
        """Parse Yarn Berry (YAML) lockfile content into specifier -> package."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ParseFailureError(f"yarn.lock is not valid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ParseFailureError("yarn.lock is not a YAML mapping")

        entries: dict[str, LockedPackage] = {}
        for header, fields in data.items():
            if header == "__metadata" or not isinstance(fields, dict):
                continue
            keys = [key.strip() for key in str(header).split(",") if key.strip()]
            if not keys or "@workspace:" in keys[0]:
                continue
            package = self._package(keys[0], {**fields, "resolved": fields.get("resolution", "")})
            for key in keys:
                entries[key] = package
        return entries

    @staticmethod
    def _package(key: str, fields: dict[str, Any]) -> LockedPackage:
        name, _ = split_package_key(key)
        return LockedPackage(
            name=name or key,
            version=str(fields.get("version") or ""),
            resolved=str(fields.get("resolved") or ""),
            dependencies=string_map(fields.get("dependencies")),
            optional_dependencies=string_map(fields.get("optionalDependencies")),
        )


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _split_field(line: str) -> tuple[str, str]:
    """Split ``key value`` where the key may be quoted (``"@scope/name" "^1.0.0"``)."""
    if line.startswith('"'):
        end = line.find('"', 1)
        if end == -1:
            raise ParseFailureError(f"yarn.lock: unterminated quote in '{line}'")
        return line[1:end], _unquote(line[end + 1 :])
    key, _, value = line.partition(" ")
    return key.rstrip(":"), _unquote(value)
