"""Tests for JSON serialization of resolution results."""

import json

from licensegraph._resolution import DependencyGraph, ImportEdge, PackageIdentity, ResolutionResult, ResolvedPackage
from licensegraph.exceptions import MissingManifestError
from licensegraph.serialization import graph_to_dict, identity_to_dict, result_to_dict, serialize_results


def sample_graph():
    chai = PackageIdentity("npm", "chai", "4.1.2", "https://registry.npmjs.org/chai/-/chai-4.1.2.tgz")
    pathval = PackageIdentity("npm", "pathval", "1.1.0")
    return DependencyGraph(
        direct=[ImportEdge("chai@^4.1.2", chai)],
        transitive={
            pathval: ResolvedPackage(pathval),
            chai: ResolvedPackage(chai, [ImportEdge("pathval@^1.0.0", pathval)]),
        },
    )


class TestSerialization:
    """Tests for the JSON document layout."""

    def test_identity_includes_purl(self):
        data = identity_to_dict(PackageIdentity("npm", "@types/node", "10.12.0"))
        assert data == {
            "ecosystem": "npm",
            "name": "@types/node",
            "version": "10.12.0",
            "location": "",
            "purl": "pkg:npm/%40types/node@10.12.0",
        }

    def test_transitive_packages_are_sorted(self):
        data = graph_to_dict(sample_graph())
        assert [entry["identity"]["name"] for entry in data["transitive"]] == ["chai", "pathval"]
        assert data["transitive"][0]["imports"][0]["requested"] == "pathval@^1.0.0"
        assert data["direct"][0]["resolved"]["location"] == "https://registry.npmjs.org/chai/-/chai-4.1.2.tgz"

    def test_successful_result(self):
        result = ResolutionResult.success_result("web", sample_graph(), "lockfile", ["npm-ls failed: npm missing"])
        data = result_to_dict(result)

        assert data["module"] == "web"
        assert data["success"] is True
        assert data["source"] == "lockfile"
        assert data["warnings"] == ["npm-ls failed: npm missing"]
        assert len(data["transitive"]) == 2
        assert "error" not in data

    def test_failed_result(self):
        result = ResolutionResult.failure_result("web", MissingManifestError("web/package.json"))
        data = result_to_dict(result)

        assert data["success"] is False
        assert data["error"] == "Could not read manifest web/package.json: not found"
        assert "transitive" not in data

    def test_serialize_results_is_valid_json(self):
        results = [ResolutionResult.success_result("web", sample_graph(), "npm-ls")]
        document = json.loads(serialize_results(results))

        assert [module["module"] for module in document["modules"]] == ["web"]
