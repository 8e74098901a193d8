"""Source registry: selects the dependency source for a module."""

from typing import Any, Dict, List

from ..exceptions import AdaptersExhaustedError, ParseFailureError, ToolUnavailableError
from ..logging_config import logger
from .manifest import Manifest
from .protocol import DependencySource, ModuleInput
from .tree import TreeNode


class SourceRegistry:
    """
    Registry for dependency source plugins.

    Sources are tried strictly one after another in priority order and the
    first one that produces a tree wins. Recoverable failures
    (``ToolUnavailableError``, ``ParseFailureError``) fall through to the
    next source; anything else propagates. Nothing is cached between calls,
    so every module is probed independently.

    Example:
        registry = SourceRegistry()
        registry.register(NpmListSource())
        registry.register(LockfileSource())
        registry.register(NodeModulesSource())

        source_name, tree, warnings = registry.resolve(module, manifest)
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._sources: List[DependencySource] = []

    def register(self, source: DependencySource) -> None:
        """
        Register a source.

        Args:
            source: Source implementation to register
        """
        self._sources.append(source)
        logger.debug(f"Registered dependency source: {source.name} (priority={source.priority})")

    def get_sources_for(self, module: ModuleInput) -> List[DependencySource]:
        """
        Get the sources applicable to a module, sorted by priority.

        Sources that run an external tool are left out when tool invocation
        is disabled for the module.
        """
        applicable = []
        for source in sorted(self._sources, key=lambda s: s.priority):
            if source.requires_tool and not module.allow_tool_invocation:
                logger.debug(f"Skipping {source.name}: tool invocation disabled for module '{module.name}'")
                continue
            if not source.supports(module):
                logger.debug(f"Skipping {source.name}: not applicable to module '{module.name}'")
                continue
            applicable.append(source)
        return applicable

    def resolve(self, module: ModuleInput, manifest: Manifest) -> tuple[str, TreeNode, List[str]]:
        """
        Produce the intermediate tree using the first source that succeeds.

        Args:
            module: Module to analyze
            manifest: Parsed root manifest of the module

        Returns:
            Tuple of (source name, tree, warnings from failed sources)

        Raises:
            AdaptersExhaustedError: If no source produced a tree
        """
        attempts: list[tuple[str, Exception]] = []
        warnings: List[str] = []

        for source in self.get_sources_for(module):
            logger.info(f"Trying dependency source: {source.name}")
            try:
                tree = source.resolve(module, manifest)
            except (ToolUnavailableError, ParseFailureError) as e:
                logger.warning(f"Dependency source {source.name} failed for module '{module.name}': {e}")
                attempts.append((source.name, e))
                warnings.append(f"{source.name} failed: {e}")
                continue

            logger.info(f"Resolved module '{module.name}' with {source.name}")
            return source.name, tree, warnings

        raise AdaptersExhaustedError(module.name, attempts)

    def list_sources(self) -> List[Dict[str, Any]]:
        """
        List all registered sources in the order they are tried.

        Returns:
            List of dicts with source info
        """
        return [
            {"name": s.name, "priority": s.priority, "requires_tool": s.requires_tool}
            for s in sorted(self._sources, key=lambda x: x.priority)
        ]

    def clear(self) -> None:
        """Remove all registered sources."""
        self._sources.clear()
