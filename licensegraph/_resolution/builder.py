"""Graph Builder: turns an intermediate tree into a canonical dependency graph.

Package managers may list the same ``(name, version)`` pair at several
positions of a tree, and every position after the first may be abbreviated:
npm prints a deduplicated entry with no children even though the package has
dependencies. The builder therefore never trusts the position it happens to
visit last. For each pair it ranks every occurrence and materializes the
richest one:

1. occurrences not flagged as duplicate back-references win over flagged ones
2. occurrences with at least one resolvable child win over empty ones
3. remaining ties go to the first occurrence of a depth-first walk with
   children in listed order

Children sets of competing non-empty occurrences are not merged.

Unmet requirements (missing or peer dependencies that are not installed) are
removed together with every edge that points at them. Children that carry no
resolved version without being flagged unmet cannot be identified; their
edges are dropped and reported as ``DanglingReference`` warnings.
"""

from ..logging_config import logger
from .models import NPM_ECOSYSTEM, DependencyGraph, ImportEdge, PackageIdentity, ResolvedPackage
from .result import DanglingReference
from .tree import TreeNode

ROOT_LABEL = "<root>"


def _is_resolvable(node: TreeNode) -> bool:
    return not node.is_unmet and bool(node.resolved_version)


class GraphBuilder:
    """Builds a ``DependencyGraph`` from one intermediate tree.

    Example:
        builder = GraphBuilder()
        graph, dangling = builder.build(root)
    """

    def __init__(self, ecosystem: str = NPM_ECOSYSTEM) -> None:
        self.ecosystem = ecosystem

    def build(self, root: TreeNode) -> tuple[DependencyGraph, list[DanglingReference]]:
        """Build the graph for the module described by ``root``.

        Args:
            root: Tree rooted at the module itself

        Returns:
            Tuple of (graph, dropped edges)
        """
        occurrences = self._collect_occurrences(root)
        selected = {key: self._select(nodes) for key, nodes in occurrences.items()}
        identities = {key: self._identity(key, selected[key], nodes) for key, nodes in occurrences.items()}

        dangling: list[DanglingReference] = []
        graph = DependencyGraph()
        graph.direct = self._edges(ROOT_LABEL, root, identities, dangling)

        pending = [edge.resolved.key for edge in reversed(graph.direct)]
        while pending:
            key = pending.pop()
            identity = identities[key]
            if identity in graph.transitive:
                continue
            node = selected[key]
            imports = self._edges(str(identity), node, identities, dangling)
            graph.transitive[identity] = ResolvedPackage(identity=identity, imports=imports)
            pending.extend(edge.resolved.key for edge in reversed(imports))

        logger.debug(
            f"Built dependency graph: {len(graph.direct)} direct, {len(graph.transitive)} transitive, "
            f"{len(dangling)} dangling reference(s) dropped"
        )
        return graph, dangling

    def _collect_occurrences(self, root: TreeNode) -> dict[tuple[str, str], list[TreeNode]]:
        """Record every occurrence of each resolvable pair in walk order.

        A node object shared by several parents is one occurrence and is only
        expanded once.
        """
        occurrences: dict[tuple[str, str], list[TreeNode]] = {}
        expanded: set[int] = set()
        stack = list(reversed(root.children))
        while stack:
            node = stack.pop()
            if not _is_resolvable(node) or id(node) in expanded:
                continue
            expanded.add(id(node))
            occurrences.setdefault(node.key, []).append(node)
            stack.extend(reversed(node.children))
        return occurrences

    @staticmethod
    def _select(nodes: list[TreeNode]) -> TreeNode:
        """Pick the richest occurrence; ``nodes`` is in walk order."""

        def rank(indexed: tuple[int, TreeNode]) -> tuple[bool, bool, int]:
            index, node = indexed
            has_children = any(_is_resolvable(child) for child in node.children)
            return (node.is_duplicate, not has_children, index)

        return min(enumerate(nodes), key=rank)[1]

    def _identity(self, key: tuple[str, str], selected: TreeNode, nodes: list[TreeNode]) -> PackageIdentity:
        location = selected.resolved_location
        if not location:
            location = next((node.resolved_location for node in nodes if node.resolved_location), "")
        name, version = key
        return PackageIdentity(ecosystem=self.ecosystem, name=name, version=version, location=location)

    @staticmethod
    def _edges(
        parent: str,
        node: TreeNode,
        identities: dict[tuple[str, str], PackageIdentity],
        dangling: list[DanglingReference],
    ) -> list[ImportEdge]:
        edges: list[ImportEdge] = []
        seen: set[PackageIdentity] = set()
        for child in node.children:
            if child.is_unmet:
                logger.debug(f"Skipping unmet dependency {child.requested} of {parent}")
                continue
            if not child.resolved_version:
                reference = DanglingReference(parent=parent, requested=child.requested)
                logger.warning(f"Dropping dangling dependency reference {reference}")
                dangling.append(reference)
                continue
            identity = identities[child.key]
            if identity in seen:
                continue
            seen.add(identity)
            edges.append(ImportEdge(requested=child.requested, resolved=identity))
        return edges


def build_graph(root: TreeNode, ecosystem: str = NPM_ECOSYSTEM) -> tuple[DependencyGraph, list[DanglingReference]]:
    """Build a dependency graph from an intermediate tree."""
    return GraphBuilder(ecosystem=ecosystem).build(root)
