"""Parser for pnpm-lock.yaml files (pnpm)."""

from pathlib import Path
from typing import Any, Hashable, Optional

import yaml

from ...exceptions import ParseFailureError
from ..manifest import Manifest
from ..tree import TreeNode
from .common import LockedPackage, assemble_tree, string_map

_IMPORTER_SECTIONS = ("dependencies", "devDependencies", "optionalDependencies")


class PnpmLockParser:
    """Parser for pnpm-lock.yaml files.

    The root project's locked versions live in ``importers["."]`` (or at the
    top level for single-project lockfiles before v6). Package entries are
    keyed by name and exact version, in one of several spellings:

    packages:
      /chai/4.1.2:              # v5
      /chai@4.1.2:              # v6
      chai@4.1.2:               # v9, dependencies moved to "snapshots"

    Requirements of a package map names to locked versions, possibly with a
    peer suffix such as ``1.0.0(react@18.2.0)`` (v6+) or ``1.0.0_react@18.2.0``
    (v5), which is part of the snapshot key but not of the version.
    """

    name = "pnpm-lock"
    supported_files = ("pnpm-lock.yaml",)

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def parse(self, lock_file_path: Path, manifest: Manifest) -> TreeNode:
        """Parse pnpm-lock.yaml into a tree."""
        try:
            with lock_file_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ParseFailureError(f"Could not parse {lock_file_path.name}: {e}") from e

        if not isinstance(data, dict):
            raise ParseFailureError(f"{lock_file_path.name} is not a YAML mapping")

        packages = data.get("packages") or {}
        snapshots = data.get("snapshots") or {}
        if not isinstance(packages, dict) or not isinstance(snapshots, dict):
            raise ParseFailureError(f"Unexpected 'packages' or 'snapshots' value in {lock_file_path.name}")

        root_versions = self._root_versions(data)

        def locate(parent: Optional[Hashable], name: str, spec: str) -> Optional[tuple[Hashable, LockedPackage]]:
            version = root_versions.get(name, "") if parent is None else spec
            if not version or version.startswith(("link:", "file:", "workspace:")):
                return None
            for key in _candidate_keys(name, version):
                if key in snapshots or key in packages:
                    return key, self._package(name, version, key, packages, snapshots)
            return None

        return assemble_tree(manifest, locate, lock_file_path.name)

    @staticmethod
    def _root_versions(data: dict[str, Any]) -> dict[str, str]:
        """Locked versions of the root project's direct dependencies."""
        importers = data.get("importers")
        root = importers.get(".", {}) if isinstance(importers, dict) else data
        if not isinstance(root, dict):
            return {}

        versions: dict[str, str] = {}
        for section in _IMPORTER_SECTIONS:
            entries = root.get(section)
            if not isinstance(entries, dict):
                continue
            for name, value in entries.items():
                # v6+: {specifier: ^1.0.0, version: 1.0.0}; v5: plain version string
                version = value.get("version") if isinstance(value, dict) else value
                if version:
                    versions.setdefault(str(name), str(version))
        return versions

    @staticmethod
    def _package(
        name: str, version: str, key: str, packages: dict[str, Any], snapshots: dict[str, Any]
    ) -> LockedPackage:
        clean = _clean_version(version)
        entry = packages.get(key) or packages.get(f"{name}@{clean}") or {}
        snapshot = snapshots.get(key) or {}
        if not isinstance(entry, dict) or not isinstance(snapshot, dict):
            raise ParseFailureError(f"Unexpected pnpm-lock.yaml entry for {key}")

        # Dependencies live in the snapshot (v9) or the package entry (older)
        source = snapshot or entry
        resolution = entry.get("resolution")
        resolved = resolution.get("tarball", "") if isinstance(resolution, dict) else ""

        package_name = entry.get("name") or name
        package_version = str(entry.get("version") or clean)
        if version.startswith("/"):
            # Aliased dependency pointing at another package key
            package_name, package_version = _split_path_key(version) or (package_name, package_version)

        return LockedPackage(
            name=package_name,
            version=package_version,
            resolved=resolved,
            dev=bool(entry.get("dev")),
            dependencies=string_map(source.get("dependencies")),
            optional_dependencies=string_map(source.get("optionalDependencies")),
        )


def _clean_version(version: str) -> str:
    """Strip the peer suffix from a locked version."""
    version = version.split("(")[0]
    if version.startswith("/"):
        return version
    return version.split("_")[0]


def _candidate_keys(name: str, version: str) -> list[str]:
    if version.startswith("/"):
        return [version]
    clean = _clean_version(version)
    candidates = [f"{name}@{version}", f"/{name}@{version}", f"/{name}/{version}"]
    if clean != version:
        candidates.extend([f"{name}@{clean}", f"/{name}@{clean}", f"/{name}/{clean}"])
    return candidates


def _split_path_key(key: str) -> Optional[tuple[str, str]]:
    """Split a v5/v6 package key ("/@scope/name/1.0.0" or "/name@1.0.0")."""
    body = key.lstrip("/").split("(")[0]
    at_pos = body.find("@", 1) if body.startswith("@") else body.find("@")
    if at_pos > 0 and "/" not in body[at_pos:]:
        return body[:at_pos], body[at_pos + 1 :]
    head, _, tail = body.rpartition("/")
    if head and tail:
        return head, tail.split("_")[0]
    return None
