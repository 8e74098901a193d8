"""node_modules based dependency source.

Priority: 30 (last resort, reads the installed package store directly)

Reconstructs the tree from the package.json of every installed package. Each
requirement is resolved the way Node resolves it: the requiring package's
own ``node_modules`` first, then every ancestor ``node_modules`` up to the
project root. No range matching is done; the first installed manifest found
wins.

Symlinked packages (pnpm layouts, linked workspaces) are followed to their
real location when that location is inside the project, so lookups continue
from where the package actually lives.
"""

from dataclasses import replace
from pathlib import Path
from typing import Optional

from ...exceptions import ParseFailureError
from ...logging_config import logger
from ..manifest import MANIFEST_FILE, Manifest, read_installed_manifest
from ..protocol import ModuleInput
from ..tree import TreeNode, unmet
from ..utils import NODE_MODULES, lookup_scopes


class NodeModulesSource:
    """Dependency source that walks the installed node_modules tree."""

    @property
    def name(self) -> str:
        return "node-modules"

    @property
    def priority(self) -> int:
        return 30

    @property
    def requires_tool(self) -> bool:
        return False

    def supports(self, module: ModuleInput) -> bool:
        return True

    def resolve(self, module: ModuleInput, manifest: Manifest) -> TreeNode:
        """
        Walk node_modules starting from the root manifest's requirements.

        A project without requirements needs nothing installed and resolves
        to a root without children.

        Raises:
            ParseFailureError: If node_modules is missing for a project that has
                requirements, or an installed package.json is unreadable
        """
        if not (module.path / NODE_MODULES).is_dir():
            if manifest.requirements(include_dev=True):
                raise ParseFailureError(f"No {NODE_MODULES} directory in {module.directory}")
            logger.info(f"Module '{module.name}' declares no dependencies")
            return TreeNode(name=manifest.name, resolved_version=manifest.version)

        logger.info(f"Walking {NODE_MODULES} for module '{module.name}'")
        return _InstalledTreeWalker(module.path).walk(manifest)


class _InstalledTreeWalker:
    """Single-use walker; holds the memo for one module analysis."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.real_root = root.resolve()
        self._memo: dict[str, TreeNode] = {}
        self._in_progress: set[str] = set()

    def walk(self, manifest: Manifest) -> TreeNode:
        root_label = manifest.name or "<root>"
        children = []
        for name, spec in manifest.requirements(include_dev=True).items():
            child = self._child("", root_label, name, spec, optional=manifest.is_optional(name))
            if child is None:
                continue
            if manifest.is_dev_only(name):
                child = replace(child, is_dev=True)
            children.append(child)
        return TreeNode(name=manifest.name, resolved_version=manifest.version, children=tuple(children))

    def _child(self, parent: str, parent_label: str, name: str, spec: str, optional: bool) -> Optional[TreeNode]:
        found = self._find(parent, name)
        if found is None:
            if optional:
                logger.debug(f"Optional dependency {name}@{spec} of {parent_label} is not installed")
                return None
            logger.warning(f"Dependency {name}@{spec} of {parent_label} is not installed")
            return unmet(name, spec)

        location, installed = found
        return self._node(location, installed, name, spec)

    def _find(self, parent: str, name: str) -> Optional[tuple[str, Manifest]]:
        """Locate an installed package, returning its real project-relative path."""
        for scope in lookup_scopes(parent):
            manifest_path = self.root / scope / name / MANIFEST_FILE
            if manifest_path.is_file():
                return self._real_location(f"{scope}/{name}"), read_installed_manifest(manifest_path)
        return None

    def _real_location(self, location: str) -> str:
        real = (self.root / location).resolve()
        try:
            return real.relative_to(self.real_root).as_posix()
        except ValueError:
            # Linked outside of the project; keep resolving from the link
            return location

    def _node(self, location: str, installed: Manifest, name: str, spec: str) -> TreeNode:
        package_name = installed.name or name
        if location in self._in_progress:
            return TreeNode(
                name=package_name,
                version_specifier=spec,
                resolved_version=installed.version,
                resolved_location=installed.resolved,
                is_duplicate=True,
            )
        if location in self._memo:
            return replace(self._memo[location], version_specifier=spec)

        self._in_progress.add(location)
        children = []
        for dep_name, dep_spec in installed.requirements().items():
            child = self._child(location, package_name, dep_name, dep_spec, optional=installed.is_optional(dep_name))
            if child is not None:
                children.append(child)
        self._in_progress.discard(location)

        node = TreeNode(
            name=package_name,
            version_specifier=spec,
            resolved_version=installed.version,
            resolved_location=installed.resolved,
            children=tuple(children),
        )
        self._memo[location] = node
        return node
