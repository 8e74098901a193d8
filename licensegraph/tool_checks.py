"""Tool availability checks for external package managers.

The live listing source needs the ecosystem's package manager on PATH. When
it is missing, analysis falls back to lockfiles and the installed tree, and
these helpers provide the installation hint that goes into the log.
"""

import shutil
from dataclasses import dataclass, field
from typing import Optional

from .logging_config import logger


@dataclass
class ToolInfo:
    """Information about an external tool."""

    name: str
    command: str
    description: str
    install_instructions: str
    homepage: str
    required_for: list[str] = field(default_factory=list)


_TOOL_METADATA: dict[str, ToolInfo] = {
    "npm": ToolInfo(
        name="npm",
        command="npm",
        description="Node.js package manager, used for `npm ls` dependency listings",
        install_instructions=(
            "Install Node.js (npm is bundled):\n"
            "  - macOS: brew install node\n"
            "  - Linux: See https://nodejs.org/en/download/package-manager\n"
            "  - Docker: docker pull node"
        ),
        homepage="https://www.npmjs.com",
        required_for=["Live dependency listings for Node.js projects"],
    ),
}


@dataclass
class ToolStatus:
    """Status of an external tool."""

    name: str
    available: bool
    path: Optional[str] = None
    info: Optional[ToolInfo] = None


def check_tool_available(command: str) -> tuple[bool, Optional[str]]:
    """
    Check if a command-line tool is available on the system.

    Args:
        command: The command to check (e.g., "npm")

    Returns:
        Tuple of (is_available, path_if_found)
    """
    path = shutil.which(command)
    return (path is not None, path)


def check_all_tools() -> dict[str, ToolStatus]:
    """
    Check availability of all known external tools.

    Returns:
        Dictionary mapping tool commands to their status
    """
    results = {}
    for command, info in _TOOL_METADATA.items():
        available, path = check_tool_available(info.command)
        results[command] = ToolStatus(name=info.name, available=available, path=path, info=info)
    return results


def log_tool_status(verbose: bool = False) -> None:
    """
    Log the status of all external tools.

    Args:
        verbose: If True, show installation instructions for missing tools
    """
    statuses = check_all_tools()
    available = [s for s in statuses.values() if s.available]
    missing = [s for s in statuses.values() if not s.available]

    if available:
        logger.info(f"Available package managers: {', '.join(s.name for s in available)}")

    if missing:
        logger.info(
            f"Missing package managers: {', '.join(s.name for s in missing)} "
            "(falling back to lockfiles and installed packages)"
        )
        if verbose:
            for status in missing:
                if status.info:
                    logger.info(f"{status.info.name}:\n  {status.info.install_instructions}")


def get_tool_install_message(command: str) -> str:
    """
    Get a formatted message with installation instructions for a tool.

    Args:
        command: Command name of the tool

    Returns:
        Formatted installation instructions string
    """
    info = _TOOL_METADATA.get(command)
    if info is None:
        return f"Install {command} and make sure it is on PATH."
    return f"{info.name} ({info.homepage})\n{info.install_instructions}"
