"""Command line interface for licensegraph.

# Configuration
Every option can also be given as an environment variable; command line
arguments take precedence:
- PROJECT_DIR: Project directory to analyze (comma separated for several)
- MODULE_NAME: Module name for a single project directory
- ALLOW_TOOL_INVOCATION: Whether `npm ls` may be run (default: true)
- TOOL_TIMEOUT: Timeout for package manager invocations in seconds
- OUTPUT_FILE: Where to write the resolved graphs as JSON
- MAX_WORKERS: Maximum number of modules analyzed concurrently
- LOG_LEVEL: DEBUG, INFO, WARNING or ERROR
- LOG_FORMAT: Set to "json" for one JSON object per log line
- SENTRY_DSN / TELEMETRY: Error reporting, off unless a DSN is set
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click
import sentry_sdk

from .. import __version__
from .._resolution import ModuleInput, ResolutionResult, analyze_modules
from .._resolution.analyzer import DEFAULT_MAX_WORKERS
from .._resolution.protocol import DEFAULT_TOOL_TIMEOUT
from ..console import print_final_failure, print_final_success, print_results_table, print_warnings
from ..exceptions import ConfigurationError, MissingManifestError
from ..logging_config import logger, setup_logging
from ..serialization import serialize_results
from ..tool_checks import log_tool_status

LICENSEGRAPH_VERSION = __version__
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Config:
    """Configuration settings for a resolution run."""

    project_dirs: list[str] = field(default_factory=list)
    module_name: Optional[str] = None
    allow_tool_invocation: bool = True
    tool_timeout: int = DEFAULT_TOOL_TIMEOUT
    output_file: Optional[str] = None
    max_workers: int = DEFAULT_MAX_WORKERS
    log_level: str = "INFO"

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.project_dirs:
            raise ConfigurationError("No project directory given")
        for directory in self.project_dirs:
            if not Path(directory).is_dir():
                raise ConfigurationError(f"Project directory not found: {directory}")
        if self.module_name and len(self.project_dirs) > 1:
            raise ConfigurationError("MODULE_NAME can only be used with a single project directory")
        if self.tool_timeout <= 0:
            raise ConfigurationError(f"Tool timeout must be positive, got {self.tool_timeout}")
        if self.max_workers < 1:
            raise ConfigurationError(f"MAX_WORKERS must be at least 1, got {self.max_workers}")

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level '{self.log_level}'. Use one of: {', '.join(LOG_LEVELS)}")

    def modules(self) -> list[ModuleInput]:
        """Create one ModuleInput per project directory."""
        return [
            ModuleInput(
                name=self.module_name or "",
                directory=directory,
                allow_tool_invocation=self.allow_tool_invocation,
                timeout=self.tool_timeout,
            )
            for directory in self.project_dirs
        ]


def evaluate_boolean(value: str) -> bool:
    """
    Evaluate string values as boolean.

    Args:
        value: String value to evaluate

    Returns:
        Boolean result
    """
    return value.lower() in ["true", "yes", "yeah", "1"]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'")


def _env_project_dirs() -> list[str]:
    raw = os.getenv("PROJECT_DIR", "")
    return [part.strip() for part in raw.split(",") if part.strip()]


def build_config(
    project_dirs: tuple[str, ...] = (),
    module_name: Optional[str] = None,
    allow_tool: Optional[bool] = None,
    timeout: Optional[int] = None,
    output_file: Optional[str] = None,
    max_workers: Optional[int] = None,
    log_level: Optional[str] = None,
) -> Config:
    """
    Build a validated Config from CLI arguments with environment fallbacks.

    Arguments left as None (or empty) are read from the environment; the
    project directory defaults to the current directory.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    dirs = list(project_dirs) or _env_project_dirs() or ["."]

    if allow_tool is None:
        allow_tool = evaluate_boolean(os.getenv("ALLOW_TOOL_INVOCATION", "True"))

    config = Config(
        project_dirs=dirs,
        module_name=module_name or os.getenv("MODULE_NAME") or None,
        allow_tool_invocation=allow_tool,
        tool_timeout=timeout if timeout is not None else _env_int("TOOL_TIMEOUT", DEFAULT_TOOL_TIMEOUT),
        output_file=output_file or os.getenv("OUTPUT_FILE") or None,
        max_workers=max_workers if max_workers is not None else _env_int("MAX_WORKERS", DEFAULT_MAX_WORKERS),
        log_level=log_level or os.getenv("LOG_LEVEL", "INFO"),
    )
    config.validate()
    return config


def load_config() -> Config:
    """
    Load and validate configuration from environment variables only.

    Returns:
        Validated configuration object
    """
    try:
        return build_config()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)


def _before_send(event, hint):
    """
    Filter events before sending to Sentry.
    Don't send user input errors - a bad directory or a missing package.json
    is expected, not a bug.
    """
    if "exc_info" in hint:
        exc_type, exc_value, tb = hint["exc_info"]
        if isinstance(exc_value, (ConfigurationError, MissingManifestError)):
            return None
    return event


def initialize_sentry() -> None:
    """Initialize Sentry for error tracking when a DSN is configured."""
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        return
    if not evaluate_boolean(os.getenv("TELEMETRY", "True")):
        logger.debug("Telemetry disabled, not initializing Sentry")
        return

    sentry_sdk.init(
        dsn=sentry_dsn,
        release=f"licensegraph@{LICENSEGRAPH_VERSION}",
        send_default_pii=False,
        traces_sample_rate=0.0,
        before_send=_before_send,
    )


def write_output(results: list[ResolutionResult], output_file: str) -> None:
    """Write the resolved graphs as JSON."""
    Path(output_file).write_text(serialize_results(results) + "\n")
    logger.info(f"Wrote dependency graphs to {output_file}")


def run_analysis(config: Config) -> list[ResolutionResult]:
    """
    Analyze every configured module and write the JSON output.

    Args:
        config: Validated configuration

    Returns:
        One result per project directory, in the configured order
    """
    if config.allow_tool_invocation:
        log_tool_status(verbose=config.log_level == "DEBUG")

    results = analyze_modules(config.modules(), max_workers=config.max_workers)

    for result in results:
        if not result.success:
            sentry_sdk.capture_exception(result.error)

    if config.output_file:
        write_output(results, config.output_file)
    return results


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("project_dirs", nargs=-1, type=click.Path(file_okay=False))
@click.option("--module-name", default=None, help="Module name (defaults to the directory name). [env: MODULE_NAME]")
@click.option(
    "--allow-tool/--no-allow-tool",
    default=None,
    help="Allow running `npm ls` to list dependencies. [env: ALLOW_TOOL_INVOCATION, default: allow]",
)
@click.option(
    "--timeout",
    type=int,
    default=None,
    help=f"Package manager timeout in seconds. [env: TOOL_TIMEOUT, default: {DEFAULT_TOOL_TIMEOUT}]",
)
@click.option("-o", "--output-file", default=None, help="Write resolved graphs as JSON. [env: OUTPUT_FILE]")
@click.option(
    "--max-workers",
    type=int,
    default=None,
    help=f"Modules analyzed concurrently. [env: MAX_WORKERS, default: {DEFAULT_MAX_WORKERS}]",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging verbosity. [env: LOG_LEVEL, default: INFO]",
)
@click.version_option(LICENSEGRAPH_VERSION, "--version", prog_name="licensegraph", message="%(prog)s %(version)s")
def cli(
    project_dirs: tuple[str, ...],
    module_name: Optional[str],
    allow_tool: Optional[bool],
    timeout: Optional[int],
    output_file: Optional[str],
    max_workers: Optional[int],
    log_level: Optional[str],
) -> None:
    """Resolve the dependency graphs of Node.js projects.

    Each PROJECT_DIR is analyzed as an independent module. The graph is read
    from `npm ls` when allowed and available, else from the lockfile, else
    from the installed node_modules tree.
    """
    initial_level = (log_level or os.getenv("LOG_LEVEL") or "INFO").upper()
    setup_logging(initial_level if initial_level in LOG_LEVELS else "INFO")
    initialize_sentry()

    try:
        config = build_config(
            project_dirs=project_dirs,
            module_name=module_name,
            allow_tool=allow_tool,
            timeout=timeout,
            output_file=output_file,
            max_workers=max_workers,
            log_level=log_level,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print_final_failure(str(e))
        sys.exit(1)

    setup_logging(config.log_level, structured=os.getenv("LOG_FORMAT", "").lower() == "json")

    try:
        results = run_analysis(config)
    except OSError as e:
        logger.error(f"Failed to write output: {e}")
        print_final_failure(f"Failed to write output: {e}")
        sys.exit(1)

    print_results_table(results)
    print_warnings(results)

    failed = [result for result in results if not result.success]
    if failed:
        print_final_failure(f"{len(failed)} of {len(results)} module(s) could not be resolved")
        sys.exit(1)

    print_final_success(len(results))


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
