"""Lockfile parsers for the npm ecosystem."""

from .common import LockedPackage, assemble_tree
from .package_lock import PackageLockParser
from .pnpm_lock import PnpmLockParser
from .protocol import LockfileParser
from .yarn_lock import YarnLockParser

__all__ = [
    "LockedPackage",
    "LockfileParser",
    "PackageLockParser",
    "PnpmLockParser",
    "YarnLockParser",
    "assemble_tree",
]
