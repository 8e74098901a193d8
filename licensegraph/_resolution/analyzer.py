"""Dependency analysis orchestration for project modules."""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

from ..exceptions import ResolutionError
from ..logging_config import logger
from .builder import GraphBuilder
from .manifest import read_manifest
from .protocol import ModuleInput
from .registry import SourceRegistry
from .result import ResolutionResult
from .sources import LockfileSource, NodeModulesSource, NpmListSource

DEFAULT_MAX_WORKERS = 4


def create_default_registry() -> SourceRegistry:
    """Create registry with the default sources: npm ls, lockfile, node_modules."""
    registry = SourceRegistry()
    registry.register(NpmListSource())
    registry.register(LockfileSource())
    registry.register(NodeModulesSource())
    return registry


class DependencyAnalyzer:
    """Resolves the dependency graph of a module.

    Reads the root manifest, asks the registry for an intermediate tree and
    hands the tree to the Graph Builder.
    """

    def __init__(self, registry: SourceRegistry | None = None) -> None:
        self._registry = registry or create_default_registry()

    def analyze(self, module: ModuleInput) -> ResolutionResult:
        """
        Analyze one module.

        Args:
            module: Module to analyze

        Returns:
            Successful ResolutionResult

        Raises:
            MissingManifestError: If package.json cannot be read
            AdaptersExhaustedError: If every dependency source failed
        """
        logger.info(f"Analyzing module '{module.name}' in {module.directory}")
        manifest = read_manifest(module.path)

        source_name, tree, warnings = self._registry.resolve(module, manifest)
        graph, dangling = GraphBuilder().build(tree)
        warnings.extend(f"Dropped dangling reference {reference}" for reference in dangling)

        logger.info(
            f"Module '{module.name}': {len(graph.direct)} direct and "
            f"{len(graph.transitive)} transitive dependencies (source: {source_name})"
        )
        return ResolutionResult.success_result(
            module_name=module.name,
            graph=graph,
            source_name=source_name,
            warnings=warnings,
        )


def analyze_module(module: ModuleInput, registry: SourceRegistry | None = None) -> ResolutionResult:
    """Analyze one module, raising on module-level errors.

    This is the main public API for a single module.
    """
    return DependencyAnalyzer(registry).analyze(module)


def analyze_modules(
    modules: Sequence[ModuleInput],
    max_workers: int = DEFAULT_MAX_WORKERS,
    registry_factory: Callable[[], SourceRegistry] = create_default_registry,
) -> list[ResolutionResult]:
    """
    Analyze several independent modules concurrently.

    Every module gets its own registry and builder; a failure in one module
    is captured as a failed result and never affects the others.

    Args:
        modules: Modules to analyze
        max_workers: Maximum number of concurrent analyses
        registry_factory: Creates a fresh registry per module

    Returns:
        One ResolutionResult per module, in input order
    """

    def run(module: ModuleInput) -> ResolutionResult:
        try:
            return DependencyAnalyzer(registry_factory()).analyze(module)
        except ResolutionError as e:
            logger.error(f"Analysis of module '{module.name}' failed: {e}")
            return ResolutionResult.failure_result(module.name, e)
        except Exception as e:
            logger.exception(f"Unexpected error while analyzing module '{module.name}'")
            return ResolutionResult.failure_result(module.name, e)

    if not modules:
        return []

    workers = max(1, min(max_workers, len(modules)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="licensegraph") as executor:
        return list(executor.map(run, modules))
