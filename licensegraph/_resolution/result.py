"""Result types for dependency resolution."""

from dataclasses import dataclass, field
from typing import Optional

from .models import DependencyGraph


@dataclass(frozen=True)
class DanglingReference:
    """An edge that was dropped because its target could not be identified.

    Attributes:
        parent: Package whose requirement was dropped ("<root>" for the module)
        requested: Requirement as written, ``name@range``
        reason: Why the target could not be identified
    """

    parent: str
    requested: str
    reason: str = "target has no resolved version"

    def __str__(self) -> str:
        return f"{self.parent} -> {self.requested}: {self.reason}"


@dataclass
class ResolutionResult:
    """
    Result of analyzing one module.

    Attributes:
        module_name: Module identity
        success: Whether a dependency graph was produced
        graph: The dependency graph (empty graph on failure)
        source_name: Name of the source that produced the tree
        warnings: Recoverable problems (dropped edges, failed sources)
        error: The module-level error on failure
    """

    module_name: str
    success: bool
    graph: DependencyGraph = field(default_factory=DependencyGraph)
    source_name: str = "none"
    warnings: list[str] = field(default_factory=list)
    error: Optional[Exception] = None

    def __post_init__(self) -> None:
        """Validate result state."""
        if not self.success and self.error is None:
            raise ValueError("Failed result must have an error")

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    @classmethod
    def success_result(
        cls,
        module_name: str,
        graph: DependencyGraph,
        source_name: str,
        warnings: Optional[list[str]] = None,
    ) -> "ResolutionResult":
        """Create a successful resolution result."""
        return cls(
            module_name=module_name,
            success=True,
            graph=graph,
            source_name=source_name,
            warnings=list(warnings or []),
        )

    @classmethod
    def failure_result(cls, module_name: str, error: Exception) -> "ResolutionResult":
        """Create a failed resolution result."""
        return cls(module_name=module_name, success=False, error=error)
