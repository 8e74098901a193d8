"""npm ls based dependency source.

Priority: 10 (live package manager listing, most authoritative)

Runs ``npm ls --json --long --all`` inside the project. The listing is a
tree keyed by package name at each level. Relevant entry fields:

- ``version``: installed version; absent for unresolved requirements
- ``resolved`` / ``_resolved``: fetch location
- ``from`` / ``_from`` / ``required``: requested specifier
- ``dev`` / ``_development``: development-only flag
- ``missing`` / ``peerMissing``: requirement declared but not installed
- ``deduped``: back-reference to an entry listed elsewhere in the tree
- ``_dependencies``: declared requirements (with ``--long``), name -> range

Example (abbreviated)::

    {
      "name": "project",
      "dependencies": {
        "chai": {
          "version": "4.1.2",
          "resolved": "https://registry.npmjs.org/chai/-/chai-4.1.2.tgz",
          "dependencies": {"type-detect": {"version": "4.0.8"}}
        },
        "request": {"required": "^2.34", "peerMissing": true}
      }
    }
"""

import json
from typing import Any

from ...exceptions import ParseFailureError, ToolUnavailableError
from ...logging_config import logger
from ...tool_checks import check_tool_available, get_tool_install_message
from ..manifest import Manifest
from ..protocol import ModuleInput
from ..tree import TreeNode
from ..utils import run_command

NPM_LS_ARGS = ["ls", "--json", "--long", "--all"]


class NpmListSource:
    """
    Dependency source backed by the live ``npm ls`` listing.

    Tool availability is probed on every call so each module analysis
    decides independently.
    """

    def __init__(self, command: str = "npm") -> None:
        self.command = command

    @property
    def name(self) -> str:
        return "npm-ls"

    @property
    def priority(self) -> int:
        return 10

    @property
    def requires_tool(self) -> bool:
        return True

    def supports(self, module: ModuleInput) -> bool:
        return module.allow_tool_invocation

    def resolve(self, module: ModuleInput, manifest: Manifest) -> TreeNode:
        """Run npm ls and parse its output into a tree."""
        output = self._list(module)
        return parse_npm_ls_output(output, manifest)

    def _list(self, module: ModuleInput) -> str:
        """Return the raw JSON listing for a module."""
        available, path = check_tool_available(self.command)
        if not available:
            raise ToolUnavailableError(
                f"{self.command} not found on PATH.\n{get_tool_install_message(self.command)}"
            )

        logger.info(f"Running {self.command} ls for module '{module.name}'")
        result = run_command(
            [path or self.command, *NPM_LS_ARGS],
            "npm ls",
            timeout=module.timeout,
            cwd=str(module.path),
        )
        return result.stdout


def parse_npm_ls_output(output: str, manifest: Manifest) -> TreeNode:
    """
    Parse ``npm ls --json`` output into an intermediate tree.

    Args:
        output: Raw JSON printed by npm ls
        manifest: Root manifest, used for requested ranges and dev flags of
            direct dependencies

    Returns:
        Root TreeNode for the project

    Raises:
        ParseFailureError: If the output is not a JSON listing
    """
    if not output or not output.strip():
        raise ParseFailureError("npm ls produced no output")
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ParseFailureError(f"npm ls output is not valid JSON: {e}") from e

    return parse_npm_ls_tree(data, manifest)


def parse_npm_ls_tree(data: Any, manifest: Manifest) -> TreeNode:
    """Parse an already decoded ``npm ls --json`` document."""
    if not isinstance(data, dict):
        raise ParseFailureError("npm ls output is not a JSON object")
    if "error" in data and "dependencies" not in data:
        raise ParseFailureError(f"npm ls reported an error: {data['error']}")

    requirements = manifest.requirements(include_dev=True)
    children = tuple(
        _parse_entry(
            name,
            entry,
            declared=requirements,
            dev_default=manifest.is_dev_only(name),
        )
        for name, entry in _dependencies(data).items()
    )

    return TreeNode(
        name=data.get("name") or manifest.name,
        resolved_version=data.get("version") or manifest.version,
        children=children,
    )


def _dependencies(entry: dict[str, Any]) -> dict[str, Any]:
    dependencies = entry.get("dependencies")
    if dependencies is None:
        return {}
    if not isinstance(dependencies, dict):
        raise ParseFailureError(f"Unexpected 'dependencies' value in npm ls output: {type(dependencies).__name__}")
    return dependencies


def _parse_entry(name: str, entry: Any, declared: dict[str, str], dev_default: bool = False) -> TreeNode:
    if not isinstance(entry, dict):
        raise ParseFailureError(f"Unexpected npm ls entry for '{name}': {type(entry).__name__}")

    version = entry.get("version") or ""
    is_unmet = bool(entry.get("missing") or entry.get("peerMissing")) or not version

    own_declared = entry.get("_dependencies")
    if not isinstance(own_declared, dict):
        own_declared = {}

    children = tuple(
        _parse_entry(child_name, child, declared=own_declared) for child_name, child in _dependencies(entry).items()
    )

    return TreeNode(
        name=name,
        version_specifier=_specifier(name, entry, declared),
        resolved_version="" if is_unmet else version,
        resolved_location=entry.get("resolved") or entry.get("_resolved") or "",
        is_duplicate=bool(entry.get("deduped")),
        is_unmet=is_unmet,
        is_dev=bool(entry.get("dev") or entry.get("_development")) or dev_default,
        children=children,
    )


def _specifier(name: str, entry: dict[str, Any], declared: dict[str, str]) -> str:
    """Find the range the parent asked for."""
    if name in declared and declared[name]:
        return declared[name]

    required = entry.get("required")
    if isinstance(required, str):
        return required

    requested = entry.get("from") or entry.get("_from") or ""
    if isinstance(requested, str) and requested.startswith(f"{name}@"):
        return requested[len(name) + 1 :]
    return ""
