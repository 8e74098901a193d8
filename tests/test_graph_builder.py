"""Tests for the Graph Builder."""

import random

import pytest

from licensegraph._resolution import GraphBuilder, PackageIdentity, TreeNode, build_graph
from licensegraph._resolution.builder import ROOT_LABEL
from licensegraph._resolution.manifest import Manifest
from licensegraph._resolution.sources import parse_npm_ls_output
from licensegraph._resolution.tree import unmet

from .npm_fixtures import load_npm_ls


def node(name, version, *children, spec="", location="", duplicate=False):
    return TreeNode(
        name=name,
        version_specifier=spec,
        resolved_version=version,
        resolved_location=location,
        is_duplicate=duplicate,
        children=tuple(children),
    )


def root(*children):
    return TreeNode(name="project", resolved_version="1.0.0", children=tuple(children))


def names(edges):
    return [edge.resolved.name for edge in edges]


def shuffled(tree, rng):
    """Copy a tree with the children of every node in random order."""
    children = [shuffled(child, rng) for child in tree.children]
    rng.shuffle(children)
    return TreeNode(
        name=tree.name,
        version_specifier=tree.version_specifier,
        resolved_version=tree.resolved_version,
        resolved_location=tree.resolved_location,
        is_duplicate=tree.is_duplicate,
        is_unmet=tree.is_unmet,
        is_dev=tree.is_dev,
        children=tuple(children),
    )


class TestGraphShape:
    """Direct and transitive shape of built graphs."""

    def test_transitive_dependencies(self):
        """a -> {b -> {c, d}, c} gives one direct edge and four packages."""
        tree = parse_npm_ls_output(load_npm_ls("transitive-deps"), Manifest())
        graph, dangling = build_graph(tree)

        assert dangling == []
        assert names(graph.direct) == ["a"]
        assert len(graph.transitive) == 4

        a = graph.find("a", "1.0.0")
        b = graph.find("b", "2.0.0")
        assert names(a.imports) == ["b", "c"]
        assert names(b.imports) == ["c", "d"]
        assert graph.find("c", "3.0.0").imports == []
        assert graph.find("d", "4.0.0").imports == []

    def test_every_edge_target_is_a_transitive_key(self):
        tree = parse_npm_ls_output(load_npm_ls("duplicates"), Manifest())
        graph, _ = build_graph(tree)

        for edge in graph.direct:
            assert edge.resolved in graph.transitive
        for package in graph:
            for edge in package.imports:
                assert edge.resolved in graph.transitive

    def test_requested_specifier_is_kept_on_edges(self):
        tree = root(node("a", "1.0.0", node("b", "2.0.0", spec="~2.0.0"), spec="^1.0.0"))
        graph, _ = build_graph(tree)

        assert graph.direct[0].requested == "a@^1.0.0"
        assert graph.find("a", "1.0.0").imports[0].requested == "b@~2.0.0"

    def test_identity_carries_ecosystem_and_location(self):
        tree = root(node("left-pad", "1.3.0", location="https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz"))
        graph, _ = build_graph(tree)

        identity = graph.direct[0].resolved
        assert identity == PackageIdentity(
            ecosystem="npm",
            name="left-pad",
            version="1.3.0",
            location="https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz",
        )

    def test_shared_node_objects_are_expanded_once(self):
        shared = node("shared", "1.0.0", node("leaf", "1.0.0"))
        tree = root(node("a", "1.0.0", shared), node("b", "1.0.0", shared))
        graph, _ = build_graph(tree)

        assert len(graph.transitive) == 4
        assert names(graph.find("shared", "1.0.0").imports) == ["leaf"]


class TestEmptyRequirements:
    """A root without requirements yields an empty graph."""

    @pytest.mark.parametrize("fixture", ["empty", "empty-dependencies"])
    def test_empty_listing(self, fixture):
        tree = parse_npm_ls_output(load_npm_ls(fixture), Manifest())
        graph, dangling = build_graph(tree)

        assert graph.direct == []
        assert graph.transitive == {}
        assert graph.is_empty
        assert dangling == []

    def test_building_twice_gives_equal_graphs(self):
        tree = parse_npm_ls_output(load_npm_ls("empty"), Manifest())
        assert build_graph(tree) == build_graph(tree)


class TestDuplicateResolution:
    """Selection of the richest occurrence of a package."""

    def test_deduped_occurrence_does_not_lose_children(self):
        """babel-runtime keeps its imports even though jira-client lists it deduped."""
        tree = parse_npm_ls_output(load_npm_ls("duplicates"), Manifest())
        graph, _ = build_graph(tree)

        babel_runtime = graph.find("babel-runtime", "6.26.0")
        assert names(babel_runtime.imports) == ["core-js", "regenerator-runtime"]
        assert babel_runtime.imports[1].resolved.version == "0.11.1"
        assert babel_runtime.identity.location == "https://registry.npmjs.org/babel-runtime/-/babel-runtime-6.26.0.tgz"

    def test_both_versions_of_a_package_are_kept(self):
        tree = parse_npm_ls_output(load_npm_ls("duplicates"), Manifest())
        graph, _ = build_graph(tree)

        regenerator = graph.find("regenerator-runtime", "0.11.1")
        assert regenerator is not None
        assert regenerator.identity.location == (
            "https://registry.npmjs.org/regenerator-runtime/-/regenerator-runtime-0.11.1.tgz"
        )
        assert graph.find("regenerator-runtime", "0.10.5") is not None
        assert len(graph.transitive) == 7

    def test_non_duplicate_outranks_duplicate_with_children(self):
        flagged = node("x", "1.0.0", node("stale", "1.0.0"), duplicate=True)
        real = node("x", "1.0.0", node("fresh", "1.0.0"))
        graph, _ = build_graph(root(node("a", "1.0.0", flagged), node("b", "1.0.0", real)))

        assert names(graph.find("x", "1.0.0").imports) == ["fresh"]
        assert graph.find("stale", "1.0.0") is None

    def test_non_empty_outranks_empty(self):
        empty = node("x", "1.0.0")
        full = node("x", "1.0.0", node("y", "1.0.0"))
        graph, _ = build_graph(root(node("a", "1.0.0", empty), node("b", "1.0.0", full)))

        assert names(graph.find("x", "1.0.0").imports) == ["y"]

    def test_first_occurrence_wins_ties(self):
        first = node("x", "1.0.0", node("y", "1.0.0"))
        second = node("x", "1.0.0", node("z", "1.0.0"))
        graph, _ = build_graph(root(node("a", "1.0.0", first), node("b", "1.0.0", second)))

        assert names(graph.find("x", "1.0.0").imports) == ["y"]
        # Children of competing occurrences are not merged
        assert graph.find("z", "1.0.0") is None

    def test_location_falls_back_to_other_occurrences(self):
        selected = node("x", "1.0.0", node("y", "1.0.0"))
        located = node("x", "1.0.0", duplicate=True, location="https://example.com/x-1.0.0.tgz")
        graph, _ = build_graph(root(node("a", "1.0.0", selected), node("b", "1.0.0", located)))

        assert graph.find("x", "1.0.0").identity.location == "https://example.com/x-1.0.0.tgz"

    @pytest.mark.parametrize("fixture", ["duplicates", "transitive-deps", "chai"])
    def test_randomized_orders_give_the_same_identities(self, fixture):
        tree = parse_npm_ls_output(load_npm_ls(fixture), Manifest())
        expected, _ = build_graph(tree)
        rng = random.Random(20180412)

        for _ in range(10):
            graph, _ = build_graph(shuffled(tree, rng))
            assert set(graph.transitive) == set(expected.transitive)
            assert {edge.resolved for edge in graph.direct} == {edge.resolved for edge in expected.direct}
            for identity, package in expected.transitive.items():
                assert {edge.resolved for edge in graph.transitive[identity].imports} == {
                    edge.resolved for edge in package.imports
                }


class TestExclusions:
    """Unmet requirements and dangling references."""

    def test_peer_missing_dependency_is_excluded(self):
        tree = parse_npm_ls_output(load_npm_ls("duplicates"), Manifest())
        graph, dangling = build_graph(tree)

        assert all(identity.name != "request" for identity in graph.transitive)
        assert graph.find("request-promise", "4.2.2").imports == []
        assert dangling == []

    def test_unmet_direct_dependency_is_excluded(self):
        graph, dangling = build_graph(root(node("a", "1.0.0"), unmet("missing", "^1.0.0")))

        assert names(graph.direct) == ["a"]
        assert len(graph.transitive) == 1
        assert dangling == []

    def test_unmet_children_of_unmet_nodes_are_ignored(self):
        broken = TreeNode(name="broken", is_unmet=True, children=(node("hidden", "1.0.0"),))
        graph, _ = build_graph(root(broken))

        assert graph.is_empty

    def test_child_without_version_is_dangling(self):
        malformed = TreeNode(name="ghost", version_specifier="^2.0.0")
        graph, dangling = build_graph(root(node("a", "1.0.0", malformed)))

        assert graph.find("a", "1.0.0").imports == []
        assert len(dangling) == 1
        assert dangling[0].parent == "a@1.0.0"
        assert dangling[0].requested == "ghost@^2.0.0"
        assert "ghost@^2.0.0" in str(dangling[0])

    def test_dangling_direct_reference_names_the_root(self):
        graph, dangling = build_graph(root(TreeNode(name="ghost")))

        assert graph.is_empty
        assert dangling[0].parent == ROOT_LABEL


class TestGraphBuilder:
    """GraphBuilder configuration."""

    def test_custom_ecosystem(self):
        graph, _ = GraphBuilder(ecosystem="yarn").build(root(node("a", "1.0.0")))
        assert graph.direct[0].resolved.ecosystem == "yarn"

    def test_cycle_marker_does_not_loop(self):
        back = node("a", "1.0.0", duplicate=True)
        tree = root(node("a", "1.0.0", node("b", "1.0.0", back)))
        graph, _ = build_graph(tree)

        assert names(graph.find("a", "1.0.0").imports) == ["b"]
        assert names(graph.find("b", "1.0.0").imports) == ["a"]
