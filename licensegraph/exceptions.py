"""Custom exceptions for licensegraph."""


class LicenseGraphError(Exception):
    """Base exception for all licensegraph operations."""


class ConfigurationError(LicenseGraphError):
    """Raised when configuration validation fails."""


class ResolutionError(LicenseGraphError):
    """Base exception for dependency resolution of a single module."""


class ToolUnavailableError(ResolutionError):
    """Raised when the package manager cannot be located or executed.

    Covers a missing binary, a non-zero exit status and a timeout.
    """


class ParseFailureError(ResolutionError):
    """Raised when a source's input is present but not in the expected schema."""


class MissingManifestError(ResolutionError):
    """Raised when the root manifest of a module cannot be read."""

    def __init__(self, path: str, reason: str = "not found") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read manifest {path}: {reason}")


class AdaptersExhaustedError(ResolutionError):
    """Raised when every dependency source failed for a module."""

    def __init__(self, module_name: str, attempts: list[tuple[str, Exception]]) -> None:
        self.module_name = module_name
        self.attempts = attempts
        details = "; ".join(f"{name}: {error}" for name, error in attempts) or "no applicable sources"
        super().__init__(f"All dependency sources failed for module '{module_name}' ({details})")
