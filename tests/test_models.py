"""Tests for resolution data models, manifests and results."""

import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from licensegraph._resolution import (
    DanglingReference,
    DependencyGraph,
    ImportEdge,
    Manifest,
    ModuleInput,
    PackageIdentity,
    ResolutionResult,
    ResolvedPackage,
    TreeNode,
    read_manifest,
)
from licensegraph.exceptions import AdaptersExhaustedError, MissingManifestError, ToolUnavailableError


class TestPackageIdentity(unittest.TestCase):
    """Tests for PackageIdentity."""

    def test_equality_needs_all_fields(self):
        a = PackageIdentity("npm", "chai", "4.1.2", "https://registry.npmjs.org/chai/-/chai-4.1.2.tgz")
        b = PackageIdentity("npm", "chai", "4.1.2", "https://mirror.example.com/chai-4.1.2.tgz")
        self.assertNotEqual(a, b)
        self.assertEqual(a.key, b.key)

    def test_hashable(self):
        identity = PackageIdentity("npm", "chai", "4.1.2")
        self.assertEqual({identity: 1}[PackageIdentity("npm", "chai", "4.1.2")], 1)

    def test_purl(self):
        self.assertEqual(PackageIdentity("npm", "chai", "4.1.2").purl, "pkg:npm/chai@4.1.2")

    def test_scoped_purl(self):
        self.assertEqual(PackageIdentity("npm", "@babel/core", "7.0.0").purl, "pkg:npm/%40babel/core@7.0.0")

    def test_str(self):
        self.assertEqual(str(PackageIdentity("npm", "chai", "4.1.2")), "chai@4.1.2")


class TestDependencyGraph(unittest.TestCase):
    """Tests for DependencyGraph helpers."""

    def setUp(self):
        self.chai = PackageIdentity("npm", "chai", "4.1.2")
        self.pathval = PackageIdentity("npm", "pathval", "1.1.0")
        self.graph = DependencyGraph(
            direct=[ImportEdge("chai@^4.1.2", self.chai)],
            transitive={
                self.chai: ResolvedPackage(self.chai, [ImportEdge("pathval@^1.0.0", self.pathval)]),
                self.pathval: ResolvedPackage(self.pathval),
            },
        )

    def test_len_and_iter(self):
        self.assertEqual(len(self.graph), 2)
        self.assertEqual([package.identity for package in self.graph], [self.chai, self.pathval])

    def test_find(self):
        self.assertIs(self.graph.find("pathval", "1.1.0"), self.graph.transitive[self.pathval])
        self.assertIsNone(self.graph.find("pathval", "9.9.9"))

    def test_edge_target(self):
        self.assertEqual(self.graph.direct[0].target, "chai")

    def test_is_empty(self):
        self.assertFalse(self.graph.is_empty)
        self.assertTrue(DependencyGraph().is_empty)


class TestTreeNode(unittest.TestCase):
    """Tests for TreeNode."""

    def test_requested(self):
        self.assertEqual(TreeNode(name="chai", version_specifier="^4.1.2").requested, "chai@^4.1.2")
        self.assertEqual(TreeNode(name="chai").requested, "chai")

    def test_walk_is_depth_first_in_listed_order(self):
        tree = TreeNode(
            name="root",
            children=(
                TreeNode(name="a", children=(TreeNode(name="a1"), TreeNode(name="a2"))),
                TreeNode(name="b"),
            ),
        )
        self.assertEqual([node.name for node in tree.walk()], ["root", "a", "a1", "a2", "b"])

    def test_frozen(self):
        node = TreeNode(name="chai")
        with self.assertRaises(AttributeError):
            node.name = "other"


class TestManifest(unittest.TestCase):
    """Tests for package.json handling."""

    def test_requirements(self):
        manifest = Manifest.from_dict(
            {
                "dependencies": {"a": "^1.0.0", "b": "^1.0.0"},
                "optionalDependencies": {"b": "^2.0.0"},
                "devDependencies": {"a": "^9.0.0", "c": "^3.0.0"},
            }
        )
        self.assertEqual(manifest.requirements(), {"a": "^1.0.0", "b": "^2.0.0"})
        self.assertEqual(manifest.requirements(include_dev=True), {"a": "^1.0.0", "b": "^2.0.0", "c": "^3.0.0"})
        self.assertTrue(manifest.is_dev_only("c"))
        self.assertFalse(manifest.is_dev_only("a"))
        self.assertTrue(manifest.is_optional("b"))

    def test_null_sections_are_empty(self):
        manifest = Manifest.from_dict({"name": "p", "dependencies": None})
        self.assertEqual(manifest.requirements(include_dev=True), {})

    def test_read_manifest(self):
        with TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "package.json"
            path.write_text(json.dumps({"name": "p", "version": "1.0.0", "dependencies": {"a": "^1.0.0"}}))
            manifest = read_manifest(Path(tmp_dir))

        self.assertEqual(manifest.name, "p")
        self.assertEqual(manifest.dependencies, {"a": "^1.0.0"})
        self.assertEqual(manifest.path, path)

    def test_read_missing_manifest(self):
        with TemporaryDirectory() as tmp_dir:
            with self.assertRaises(MissingManifestError) as ctx:
                read_manifest(Path(tmp_dir))
        self.assertIn("not found", str(ctx.exception))

    def test_read_non_object_manifest(self):
        with TemporaryDirectory() as tmp_dir:
            (Path(tmp_dir) / "package.json").write_text("[]")
            with self.assertRaises(MissingManifestError):
                read_manifest(Path(tmp_dir))


class TestModuleInput(unittest.TestCase):
    """Tests for ModuleInput validation."""

    def test_name_defaults_to_directory_name(self):
        self.assertEqual(ModuleInput(name="", directory="/srv/web").name, "web")

    def test_directory_required(self):
        with self.assertRaises(ValueError):
            ModuleInput(name="web", directory="")

    def test_timeout_must_be_positive(self):
        with self.assertRaises(ValueError):
            ModuleInput(name="web", directory="/srv/web", timeout=0)


class TestResolutionResult(unittest.TestCase):
    """Tests for ResolutionResult."""

    def test_success_result(self):
        result = ResolutionResult.success_result("web", DependencyGraph(), "lockfile", ["note"])
        self.assertTrue(result.success)
        self.assertIsNone(result.error_message)
        self.assertEqual(result.warnings, ["note"])

    def test_failure_result(self):
        error = AdaptersExhaustedError("web", [("npm-ls", ToolUnavailableError("npm missing"))])
        result = ResolutionResult.failure_result("web", error)
        self.assertFalse(result.success)
        self.assertTrue(result.graph.is_empty)
        self.assertIn("npm-ls: npm missing", result.error_message)

    def test_failure_requires_error(self):
        with self.assertRaises(ValueError):
            ResolutionResult(module_name="web", success=False)

    def test_dangling_reference_str(self):
        reference = DanglingReference(parent="<root>", requested="ghost@^1.0.0")
        self.assertEqual(str(reference), "<root> -> ghost@^1.0.0: target has no resolved version")


if __name__ == "__main__":
    unittest.main()
