"""Intermediate dependency tree shared by every dependency source."""

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class TreeNode:
    """A package and the packages it requires, as reported by one source.

    Nodes are built fresh for every source invocation and never mutated; the
    Graph Builder consumes a tree once and discards it. The same node object
    may appear under several parents of one tree.

    Attributes:
        name: Package name
        version_specifier: Range or tag the parent asked for (e.g., "^1.0.0")
        resolved_version: Installed or locked version, empty when unresolved
        resolved_location: Resolved fetch URL or path, empty when unknown
        is_duplicate: This entry back-references a node defined elsewhere and
            its children may be abbreviated or missing
        is_unmet: The requirement is declared but not resolved (missing or
            peer dependency that is not installed)
        is_dev: Only required for development
        children: Direct requirements of this package, in listed order
    """

    name: str
    version_specifier: str = ""
    resolved_version: str = ""
    resolved_location: str = ""
    is_duplicate: bool = False
    is_unmet: bool = False
    is_dev: bool = False
    children: tuple["TreeNode", ...] = ()

    @property
    def requested(self) -> str:
        """Specifier as written by the parent, ``name@range``."""
        if self.version_specifier:
            return f"{self.name}@{self.version_specifier}"
        return self.name

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.resolved_version)

    def walk(self) -> Iterator["TreeNode"]:
        """Yield this node and its descendants depth-first, children in order.

        Shared nodes are yielded once per position they occupy.
        """
        stack: list[TreeNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def unmet(name: str, version_specifier: str = "", is_dev: bool = False) -> TreeNode:
    """Build a node for a requirement that did not resolve."""
    return TreeNode(name=name, version_specifier=version_specifier, is_unmet=True, is_dev=is_dev)
