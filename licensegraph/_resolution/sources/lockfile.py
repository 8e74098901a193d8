"""Lockfile based dependency source.

Priority: 20 (persisted lockfile, used when npm cannot run)

Looks for lock artifacts in a fixed order and parses the first one present:

1. npm-shrinkwrap.json
2. package-lock.json
3. yarn.lock
4. pnpm-lock.yaml

Only the first present file is parsed. If it cannot be parsed the source
fails as a whole; a lower priority lockfile is not consulted, because it is
likely stale next to the one the project actually uses.
"""

from pathlib import Path
from typing import Optional

from ...exceptions import ParseFailureError
from ...logging_config import logger
from ..lockfiles import LockfileParser, PackageLockParser, PnpmLockParser, YarnLockParser
from ..manifest import Manifest
from ..protocol import ModuleInput
from ..tree import TreeNode

LOCKFILE_PRIORITY = (
    "npm-shrinkwrap.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
)


def create_default_parsers() -> list[LockfileParser]:
    """Create the default lockfile parsers."""
    return [PackageLockParser(), YarnLockParser(), PnpmLockParser()]


class LockfileSource:
    """
    Dependency source backed by a persisted lockfile.

    Example:
        source = LockfileSource()
        lock_file = source.find_lockfile(Path("my-project"))
        if lock_file:
            tree = source.resolve(module, manifest)
    """

    def __init__(
        self,
        parsers: Optional[list[LockfileParser]] = None,
        lock_files: tuple[str, ...] = LOCKFILE_PRIORITY,
    ) -> None:
        self._parsers = parsers if parsers is not None else create_default_parsers()
        self._lock_files = lock_files

    @property
    def name(self) -> str:
        return "lockfile"

    @property
    def priority(self) -> int:
        return 20

    @property
    def requires_tool(self) -> bool:
        return False

    def supports(self, module: ModuleInput) -> bool:
        # Missing lockfiles are reported by resolve()
        return True

    def find_lockfile(self, directory: Path) -> Optional[Path]:
        """Return the highest priority lockfile present in a directory."""
        for lock_file_name in self._lock_files:
            candidate = directory / lock_file_name
            if candidate.is_file() and self.get_parser_for(lock_file_name) is not None:
                return candidate
        return None

    def get_parser_for(self, lock_file_name: str) -> Optional[LockfileParser]:
        for parser in self._parsers:
            if parser.supports(lock_file_name):
                return parser
        return None

    def resolve(self, module: ModuleInput, manifest: Manifest) -> TreeNode:
        """Parse the module's lockfile into a tree."""
        lock_file = self.find_lockfile(module.path)
        if lock_file is None:
            raise ParseFailureError(f"No lockfile ({', '.join(self._lock_files)}) found in {module.directory}")

        parser = self.get_parser_for(lock_file.name)
        if parser is None:
            raise ParseFailureError(f"No parser registered for {lock_file.name}")

        logger.info(f"Using {parser.name} to parse {lock_file.name} for module '{module.name}'")
        return parser.parse(lock_file, manifest)

    @property
    def supported_files(self) -> set[str]:
        """Get all supported lockfile names."""
        result: set[str] = set()
        for parser in self._parsers:
            result.update(parser.supported_files)
        return result
