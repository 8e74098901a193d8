"""Shared tree assembly for lockfile parsers.

Every lock format boils down to "locked package X requires these names and
ranges", plus a format-specific rule for finding the locked package a
requirement points at. Parsers provide that rule as a ``locate`` callback and
``assemble_tree`` does the rest: memoizing packages that are required from
several places and cutting dependency cycles with a duplicate marker.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Hashable, Optional

from ...logging_config import logger
from ..manifest import Manifest
from ..tree import TreeNode, unmet


@dataclass
class LockedPackage:
    """A package entry of a lockfile, normalized across formats.

    Attributes:
        name: Package name
        version: Locked version
        resolved: Fetch location recorded in the lockfile
        dev: Whether the lockfile marks the package as development only
        dependencies: Required packages, name -> range (or locked version)
        optional_dependencies: Optional packages, name -> range
    """

    name: str
    version: str
    resolved: str = ""
    dev: bool = False
    dependencies: dict[str, str] = field(default_factory=dict)
    optional_dependencies: dict[str, str] = field(default_factory=dict)

    def requirements(self) -> list[tuple[str, str, bool]]:
        """Requirements as (name, spec, optional) in declaration order."""
        required = [(name, spec, False) for name, spec in self.dependencies.items()]
        required.extend(
            (name, spec, True) for name, spec in self.optional_dependencies.items() if name not in self.dependencies
        )
        return required


# Given the handle of the requiring package (None for the project root), the
# required name and spec, return (handle, package) of the locked entry.
Locator = Callable[[Optional[Hashable], str, str], Optional[tuple[Hashable, LockedPackage]]]


def string_map(value: object) -> dict[str, str]:
    """Coerce a requirements section to ``dict[str, str]``; other shapes become empty."""
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) if v is not None else "" for k, v in value.items()}


def assemble_tree(manifest: Manifest, locate: Locator, lock_name: str) -> TreeNode:
    """Build the project tree from a lockfile.

    Args:
        manifest: Root manifest; its requirements are the direct dependencies
        locate: Format-specific lookup of a requirement
        lock_name: Lockfile name for log messages

    Returns:
        Root TreeNode for the project
    """
    memo: dict[Hashable, TreeNode] = {}
    in_progress: set[Hashable] = set()

    def build(handle: Hashable, package: LockedPackage, spec: str) -> TreeNode:
        if handle in in_progress:
            return TreeNode(
                name=package.name,
                version_specifier=spec,
                resolved_version=package.version,
                resolved_location=package.resolved,
                is_duplicate=True,
                is_dev=package.dev,
            )
        if handle in memo:
            return replace(memo[handle], version_specifier=spec)

        in_progress.add(handle)
        children = []
        for name, child_spec, optional in package.requirements():
            child = child_for(handle, package.name, name, child_spec, optional)
            if child is not None:
                children.append(child)
        in_progress.discard(handle)

        node = TreeNode(
            name=package.name,
            version_specifier=spec,
            resolved_version=package.version,
            resolved_location=package.resolved,
            is_dev=package.dev,
            children=tuple(children),
        )
        memo[handle] = node
        return node

    def child_for(
        parent: Optional[Hashable], parent_name: str, name: str, spec: str, optional: bool
    ) -> Optional[TreeNode]:
        found = locate(parent, name, spec)
        if found is None:
            if optional:
                logger.debug(f"Optional dependency {name}@{spec} of {parent_name} is not in {lock_name}")
                return None
            logger.warning(f"Dependency {name}@{spec} of {parent_name} is not in {lock_name}")
            return unmet(name, spec)
        handle, package = found
        return build(handle, package, spec)

    root_label = manifest.name or "<root>"
    children = []
    for name, spec in manifest.requirements(include_dev=True).items():
        child = child_for(None, root_label, name, spec, manifest.is_optional(name))
        if child is None:
            continue
        if manifest.is_dev_only(name) and not child.is_dev:
            child = replace(child, is_dev=True)
        children.append(child)

    return TreeNode(name=manifest.name, resolved_version=manifest.version, children=tuple(children))
