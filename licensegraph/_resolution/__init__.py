"""Dependency graph resolution for Node.js projects.

This module resolves the complete dependency graph of a project: its direct
dependencies and a deduplicated map of every transitive package with the
packages each one imports.

Three sources can produce the intermediate tree, tried in this order:
- npm-ls: the live ``npm ls --json`` listing (skipped when tool invocation
  is disabled or npm is not installed)
- lockfile: npm-shrinkwrap.json, package-lock.json, yarn.lock or
  pnpm-lock.yaml, whichever is found first
- node-modules: the installed package store, walked with Node's
  nested-then-ancestor lookup

Example usage:
    from licensegraph._resolution import ModuleInput, analyze_module

    result = analyze_module(ModuleInput(name="web", directory="./web"))
    print(f"{len(result.graph.transitive)} packages via {result.source_name}")
"""

from .analyzer import DependencyAnalyzer, analyze_module, analyze_modules, create_default_registry
from .builder import GraphBuilder, build_graph
from .manifest import Manifest, read_manifest
from .models import DependencyGraph, ImportEdge, PackageIdentity, ResolvedPackage
from .protocol import DependencySource, ModuleInput
from .registry import SourceRegistry
from .result import DanglingReference, ResolutionResult
from .tree import TreeNode

__all__ = [
    # Main API
    "analyze_module",
    "analyze_modules",
    # Classes for advanced usage
    "DependencyAnalyzer",
    "DependencySource",
    "GraphBuilder",
    "SourceRegistry",
    "build_graph",
    "create_default_registry",
    "read_manifest",
    # Models
    "DanglingReference",
    "DependencyGraph",
    "ImportEdge",
    "Manifest",
    "ModuleInput",
    "PackageIdentity",
    "ResolutionResult",
    "ResolvedPackage",
    "TreeNode",
]
