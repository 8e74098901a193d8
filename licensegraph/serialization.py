"""JSON serialization of resolution results.

The reporting layer consumes these documents; identities carry a Package URL
so they can be matched against license data without re-deriving names.
"""

import json
from typing import Any, Iterable

from ._resolution.models import DependencyGraph, ImportEdge, PackageIdentity
from ._resolution.result import ResolutionResult


def identity_to_dict(identity: PackageIdentity) -> dict[str, str]:
    return {
        "ecosystem": identity.ecosystem,
        "name": identity.name,
        "version": identity.version,
        "location": identity.location,
        "purl": identity.purl,
    }


def edge_to_dict(edge: ImportEdge) -> dict[str, Any]:
    return {"requested": edge.requested, "resolved": identity_to_dict(edge.resolved)}


def graph_to_dict(graph: DependencyGraph) -> dict[str, Any]:
    """Serialize a graph; transitive packages are sorted by name and version for stable output."""
    packages = sorted(graph.transitive.values(), key=lambda p: (p.identity.name, p.identity.version))
    return {
        "direct": [edge_to_dict(edge) for edge in graph.direct],
        "transitive": [
            {
                "identity": identity_to_dict(package.identity),
                "imports": [edge_to_dict(edge) for edge in package.imports],
            }
            for package in packages
        ],
    }


def result_to_dict(result: ResolutionResult) -> dict[str, Any]:
    data: dict[str, Any] = {
        "module": result.module_name,
        "success": result.success,
        "source": result.source_name,
        "warnings": list(result.warnings),
    }
    if result.success:
        data.update(graph_to_dict(result.graph))
    else:
        data["error"] = result.error_message
    return data


def serialize_results(results: Iterable[ResolutionResult], indent: int = 2) -> str:
    """Serialize resolution results as a JSON document."""
    return json.dumps({"modules": [result_to_dict(result) for result in results]}, indent=indent)
