"""Protocol definition for dependency source plugins.

A dependency source turns a project directory into an intermediate
``TreeNode`` rooted at the project. Sources are registered with
``SourceRegistry``, which tries them in priority order and falls through on
recoverable failures.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .manifest import Manifest
from .tree import TreeNode

# Default timeout for package manager invocations, in seconds
DEFAULT_TOOL_TIMEOUT = 300


@dataclass
class ModuleInput:
    """
    Input parameters for analyzing one project module.

    Attributes:
        name: Module identity, used in logs and results
        directory: Project directory holding the root manifest
        allow_tool_invocation: Whether sources may run the package manager
        timeout: Timeout in seconds for package manager invocations
    """

    name: str
    directory: str
    allow_tool_invocation: bool = True
    timeout: int = DEFAULT_TOOL_TIMEOUT

    def __post_init__(self) -> None:
        """Validate input parameters."""
        if not self.directory:
            raise ValueError("Module directory must be specified")
        if self.timeout <= 0:
            raise ValueError("Timeout must be a positive number of seconds")
        if not self.name:
            self.name = Path(self.directory).resolve().name

    @property
    def path(self) -> Path:
        return Path(self.directory)


class DependencySource(Protocol):
    """
    Protocol defining the interface for dependency source plugins.

    Sources have priorities; lower numbers are tried first. The live tool
    listing is the most authoritative, the installed tree walk the least.

    Example:
        class NpmListSource:
            name = "npm-ls"
            priority = 10
            requires_tool = True

            def supports(self, module: ModuleInput) -> bool:
                return module.allow_tool_invocation

            def resolve(self, module: ModuleInput, manifest: Manifest) -> TreeNode:
                # Run `npm ls --json` and parse the tree
                ...
    """

    @property
    def name(self) -> str:
        """
        Human-readable name of this source.

        Used for logging and recorded on the resolution result.
        Examples: "npm-ls", "lockfile", "node-modules"
        """
        ...

    @property
    def priority(self) -> int:
        """
        Priority of this source (lower = tried first).

        Recommended ranges:
        - 1-19: Live package manager invocation
        - 20-29: Persisted lockfiles
        - 30+: Installed package store inspection
        """
        ...

    @property
    def requires_tool(self) -> bool:
        """Whether this source runs an external tool.

        Such sources are skipped when tool invocation is disabled.
        """
        ...

    def supports(self, module: ModuleInput) -> bool:
        """
        Cheap check whether this source can possibly handle the module.

        Returning False is a silent fall through to the next source.
        """
        ...

    def resolve(self, module: ModuleInput, manifest: Manifest) -> TreeNode:
        """
        Build the intermediate tree for a module.

        Args:
            module: Module being analyzed
            manifest: Already parsed root manifest of the module

        Returns:
            Root TreeNode describing the module itself

        Raises:
            ToolUnavailableError: If the required tool cannot run
            ParseFailureError: If the source's input has an unexpected schema
        """
        ...
