"""CLI module for licensegraph.

This module provides the command-line interface for dependency graph
resolution. It supports both CLI arguments and environment variables for
configuration.
"""

from .main import (
    Config,
    build_config,
    cli,
    evaluate_boolean,
    load_config,
    main,
    run_analysis,
)

__all__ = [
    "cli",
    "main",
    "Config",
    "build_config",
    "load_config",
    "run_analysis",
    "evaluate_boolean",
]
