"""Rich console utilities for licensegraph.

This module provides a shared Rich Console instance and the summary output
printed after modules are analyzed.
"""

import os
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from ._resolution.result import ResolutionResult

# Detect CI environments
IS_GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"
IS_CI = os.getenv("CI") == "true" or IS_GITHUB_ACTIONS

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "highlight": "magenta",
    }
)

# Shared console instance
# Force colors ON in GitHub Actions (it supports ANSI colors but Rich may incorrectly disable them)
console = Console(
    theme=custom_theme,
    force_terminal=IS_GITHUB_ACTIONS or None,
    color_system="auto",
)


def gha_warning(message: str, title: Optional[str] = None) -> None:
    """
    Emit a warning, as a GitHub Actions annotation when running there.

    Args:
        message: Warning message
        title: Optional title for the warning
    """
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::warning title={title}::{message}")
        else:
            print(f"::warning::{message}")
    else:
        if title:
            console.print(f"[warning]Warning ({escape(title)}):[/warning] {escape(message)}")
        else:
            console.print(f"[warning]Warning:[/warning] {escape(message)}")


def gha_error(message: str, title: Optional[str] = None) -> None:
    """
    Emit an error, as a GitHub Actions annotation when running there.

    Args:
        message: Error message
        title: Optional title for the error
    """
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::error title={title}::{message}")
        else:
            print(f"::error::{message}")
    else:
        if title:
            console.print(f"[error]Error ({escape(title)}):[/error] {escape(message)}")
        else:
            console.print(f"[error]Error:[/error] {escape(message)}")


def print_results_table(results: Sequence[ResolutionResult]) -> None:
    """
    Print one row per analyzed module.

    Failed modules show their error in place of the counts.

    Args:
        results: Results in the order the modules were given
    """
    table = Table(title="Dependency Resolution", show_header=True, header_style="bold")
    table.add_column("Module", style="cyan")
    table.add_column("Source")
    table.add_column("Direct", justify="right")
    table.add_column("Transitive", justify="right")
    table.add_column("Warnings", justify="right")
    table.add_column("Status")

    for result in results:
        if result.success:
            table.add_row(
                escape(result.module_name),
                result.source_name,
                str(len(result.graph.direct)),
                str(len(result.graph.transitive)),
                str(len(result.warnings)),
                "[success]ok[/success]",
            )
        else:
            table.add_row(
                escape(result.module_name),
                "-",
                "-",
                "-",
                str(len(result.warnings)),
                f"[error]failed[/error]: {escape(result.error_message or '')}",
            )

    console.print(table)


def print_warnings(results: Sequence[ResolutionResult]) -> None:
    """Print the recoverable problems recorded for each module."""
    for result in results:
        for warning in result.warnings:
            gha_warning(warning, title=result.module_name)


def print_final_success(module_count: int) -> None:
    """Print final success message."""
    console.print()
    console.print(f"[success]Resolved {module_count} module(s).[/success]")


def print_final_failure(message: str) -> None:
    """Print final failure message."""
    console.print()
    gha_error(message, title="Resolution Failed")
    if not IS_GITHUB_ACTIONS:
        console.rule("[bold red]FAILED[/bold red]", style="red")
