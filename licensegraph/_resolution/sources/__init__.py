"""Dependency source plugins for the npm ecosystem."""

from .lockfile import LOCKFILE_PRIORITY, LockfileSource
from .node_modules import NodeModulesSource
from .npm_ls import NpmListSource, parse_npm_ls_output, parse_npm_ls_tree

__all__ = [
    "LOCKFILE_PRIORITY",
    "LockfileSource",
    "NodeModulesSource",
    "NpmListSource",
    "parse_npm_ls_output",
    "parse_npm_ls_tree",
]
