"""Reading package.json manifests."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..exceptions import MissingManifestError, ParseFailureError

MANIFEST_FILE = "package.json"


@dataclass
class Manifest:
    """The parts of a package.json that matter for dependency resolution.

    Attributes:
        name: Package name (may be empty for private root projects)
        version: Package version
        dependencies: Runtime requirements, name -> range
        dev_dependencies: Development requirements, name -> range
        optional_dependencies: Optional requirements, name -> range
        resolved: Fetch location npm recorded for an installed package
        path: File the manifest was read from
    """

    name: str = ""
    version: str = ""
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    optional_dependencies: dict[str, str] = field(default_factory=dict)
    resolved: str = ""
    path: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: Path | None = None) -> "Manifest":
        """Build a manifest from parsed package.json data.

        Missing or null requirement sections are treated as empty.
        """
        return cls(
            name=data.get("name") or "",
            version=data.get("version") or "",
            dependencies=_requirements(data.get("dependencies")),
            dev_dependencies=_requirements(data.get("devDependencies")),
            optional_dependencies=_requirements(data.get("optionalDependencies")),
            resolved=data.get("_resolved") or "",
            path=path,
        )

    def requirements(self, include_dev: bool = False) -> dict[str, str]:
        """Declared requirements in resolution order.

        Optional dependencies override regular ones of the same name, as npm
        does; dev dependencies come last and never override.
        """
        merged = dict(self.dependencies)
        merged.update(self.optional_dependencies)
        if include_dev:
            for name, spec in self.dev_dependencies.items():
                merged.setdefault(name, spec)
        return merged

    def is_dev_only(self, name: str) -> bool:
        if name in self.dependencies or name in self.optional_dependencies:
            return False
        return name in self.dev_dependencies

    def is_optional(self, name: str) -> bool:
        return name in self.optional_dependencies


def _requirements(section: Any) -> dict[str, str]:
    if not isinstance(section, dict):
        return {}
    return {str(name): str(spec) if spec is not None else "" for name, spec in section.items()}


def read_manifest(directory: Path) -> Manifest:
    """Read the root manifest of a module.

    Raises:
        MissingManifestError: If package.json is absent or cannot be parsed
    """
    path = directory / MANIFEST_FILE
    if not path.is_file():
        raise MissingManifestError(str(path))
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MissingManifestError(str(path), reason=str(e)) from e
    if not isinstance(data, dict):
        raise MissingManifestError(str(path), reason="top level is not a JSON object")
    return Manifest.from_dict(data, path=path)


def read_installed_manifest(path: Path) -> Manifest:
    """Read the manifest of an installed package.

    Raises:
        ParseFailureError: If the file exists but is not a valid manifest
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseFailureError(f"Invalid installed manifest {path}: {e}") from e
    if not isinstance(data, dict):
        raise ParseFailureError(f"Invalid installed manifest {path}: top level is not a JSON object")
    return Manifest.from_dict(data, path=path)
