"""Protocol definition for lockfile tree parsers."""

from pathlib import Path
from typing import Protocol

from ..manifest import Manifest
from ..tree import TreeNode


class LockfileParser(Protocol):
    """Protocol for lockfile parsing plugins.

    Each parser turns one lockfile format into the intermediate tree, using
    the root manifest to decide which locked packages are direct
    dependencies.

    Example:
        class YarnLockParser:
            name = "yarn-lock"
            supported_files = ("yarn.lock",)

            def supports(self, lock_file_name: str) -> bool:
                return lock_file_name in self.supported_files

            def parse(self, lock_file_path: Path, manifest: Manifest) -> TreeNode:
                ...
    """

    @property
    def name(self) -> str:
        """Human-readable name of this parser.

        Examples: "npm-package-lock", "yarn-lock", "pnpm-lock"
        """
        ...

    @property
    def supported_files(self) -> tuple[str, ...]:
        """Lock file names this parser handles."""
        ...

    def supports(self, lock_file_name: str) -> bool:
        """Check if this parser can handle the given lockfile name."""
        ...

    def parse(self, lock_file_path: Path, manifest: Manifest) -> TreeNode:
        """Parse a lockfile into a tree rooted at the project.

        Raises:
            ParseFailureError: If the lockfile cannot be read or has an
                unexpected schema.
        """
        ...
