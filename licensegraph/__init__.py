"""Dependency graph resolution for Node.js projects."""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path


def _get_version() -> str:
    """Return the installed version, else the one declared in pyproject.toml."""
    try:
        return version("licensegraph")
    except PackageNotFoundError:
        pass

    # Source checkout without an install
    try:
        import tomllib
    except ImportError:
        return "unknown"

    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    if not pyproject_path.exists():
        return "unknown"
    try:
        with open(pyproject_path, "rb") as f:
            return tomllib.load(f).get("project", {}).get("version", "unknown")
    except (OSError, tomllib.TOMLDecodeError):
        return "unknown"


__version__ = _get_version()
