"""Parser for package-lock.json and npm-shrinkwrap.json files (npm)."""

import json
from pathlib import Path
from typing import Any, Hashable, Optional

from ...exceptions import ParseFailureError
from ..manifest import Manifest
from ..tree import TreeNode
from ..utils import NODE_MODULES, lookup_scopes
from .common import LockedPackage, assemble_tree, string_map


class PackageLockParser:
    """Parser for package-lock.json and npm-shrinkwrap.json files.

    Both files share one schema. v2/v3 lockfiles hold a flat map keyed by
    install path:
    {
        "packages": {
            "": {"name": "project", "dependencies": {"chai": "^4.1.2"}},
            "node_modules/chai": {
                "version": "4.1.2",
                "resolved": "https://registry.npmjs.org/chai/-/chai-4.1.2.tgz",
                "dependencies": {"deep-eql": "^3.0.0"}
            },
            "node_modules/chai/node_modules/deep-eql": {...}
        }
    }

    v1 lockfiles nest packages instead, and list requirements under
    "requires":
    {
        "dependencies": {
            "chai": {
                "version": "4.1.2",
                "requires": {"deep-eql": "^3.0.0"},
                "dependencies": {"deep-eql": {...}}
            }
        }
    }

    Requirements are resolved the way Node resolves them on disk: nested
    scope first, then each enclosing scope.
    """

    name = "npm-package-lock"
    supported_files = ("npm-shrinkwrap.json", "package-lock.json")

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def parse(self, lock_file_path: Path, manifest: Manifest) -> TreeNode:
        """Parse a package-lock.json style file into a tree."""
        try:
            with lock_file_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseFailureError(f"Could not parse {lock_file_path.name}: {e}") from e

        if not isinstance(data, dict):
            raise ParseFailureError(f"{lock_file_path.name} is not a JSON object")

        packages = data.get("packages")
        if isinstance(packages, dict) and packages:
            return assemble_tree(manifest, self._flat_locator(packages), lock_file_path.name)

        dependencies = data.get("dependencies") or {}
        if not isinstance(dependencies, dict):
            raise ParseFailureError(f"Unexpected 'dependencies' value in {lock_file_path.name}")
        return assemble_tree(manifest, self._nested_locator(dependencies), lock_file_path.name)

    def _flat_locator(self, packages: dict[str, Any]):
        """Locate requirements in a v2/v3 ``packages`` map keyed by install path."""

        def locate(parent: Optional[Hashable], name: str, spec: str) -> Optional[tuple[Hashable, LockedPackage]]:
            for scope in lookup_scopes(parent if isinstance(parent, str) else ""):
                path = f"{scope}/{name}"
                entry = packages.get(path)
                if not isinstance(entry, dict):
                    continue
                if entry.get("link"):
                    target = entry.get("resolved") or ""
                    linked = packages.get(target)
                    if not isinstance(linked, dict):
                        return None
                    return target, self._flat_package(target, linked, fallback_name=name)
                return path, self._flat_package(path, entry)
            return None

        return locate

    @staticmethod
    def _flat_package(path: str, entry: dict[str, Any], fallback_name: str = "") -> LockedPackage:
        name = entry.get("name") or _name_from_path(path) or fallback_name
        return LockedPackage(
            name=name,
            version=str(entry.get("version") or ""),
            resolved=entry.get("resolved") or "",
            dev=bool(entry.get("dev") or entry.get("devOptional")),
            dependencies=string_map(entry.get("dependencies")),
            optional_dependencies=string_map(entry.get("optionalDependencies")),
        )

    def _nested_locator(self, dependencies: dict[str, Any]):
        """Locate requirements in a v1 nested ``dependencies`` tree.

        Handles are tuples of names from the top level down to the entry, so
        ``("a", "b")`` is ``dependencies.a.dependencies.b``.
        """

        def scope_at(handle: tuple[str, ...]) -> dict[str, Any]:
            scope = dependencies
            for name in handle:
                entry = scope.get(name)
                if not isinstance(entry, dict):
                    return {}
                scope = entry.get("dependencies") or {}
                if not isinstance(scope, dict):
                    return {}
            return scope

        def locate(parent: Optional[Hashable], name: str, spec: str) -> Optional[tuple[Hashable, LockedPackage]]:
            chain = parent if isinstance(parent, tuple) else ()
            for depth in range(len(chain), -1, -1):
                entry = scope_at(chain[:depth]).get(name)
                if isinstance(entry, dict):
                    return chain[:depth] + (name,), self._nested_package(name, entry)
            return None

        return locate

    @staticmethod
    def _nested_package(name: str, entry: dict[str, Any]) -> LockedPackage:
        return LockedPackage(
            name=name,
            version=str(entry.get("version") or ""),
            resolved=entry.get("resolved") or "",
            dev=bool(entry.get("dev")),
            # Very old npm 5 lockfiles use "requires": true
            dependencies=string_map(entry.get("requires")),
        )


def _name_from_path(path: str) -> str:
    """Extract package name from an install path ("node_modules/@scope/name")."""
    marker = f"{NODE_MODULES}/"
    if marker not in path:
        return ""
    return path.rsplit(marker, 1)[-1]
