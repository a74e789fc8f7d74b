"""CLI Helper Functions for Dock.

This module provides reusable helper functions for CLI commands to reduce
code duplication and standardize behavior across all commands.

The helpers provide:
- Project context and configuration loading
- Docker connection setup
- Interactive confirmation
- Consistent error reporting and exit codes
- Table formatting for output
"""

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import click
from rich.console import Console
from tabulate import tabulate

from dock.core.config_file import load_project_config
from dock.core.constants import AFFIRMATIVE_ANSWERS
from dock.core.exceptions import DockError
from dock.models.store import ConfigurationStore
from dock.services.docker_service import DockerService
from dock.services.exceptions import ServiceError
from dock.utils.path_finder import PathFinder

console = Console(stderr=True)


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Report Dock and Docker errors and exit with their status."""
    try:
        yield
    except (DockError, ServiceError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)


def get_project_store(config_path: Optional[str] = None) -> ConfigurationStore:
    """Load the configuration store for the project containing the working directory.

    Note:
        Exits with error message if the configuration file cannot be loaded.
    """
    repo_root = PathFinder.find_repo_root()
    with exit_on_error():
        return load_project_config(repo_root, Path(config_path) if config_path else None)


def get_docker_service() -> DockerService:
    """Initialize Docker service with error handling.

    Returns:
        DockerService instance

    Note:
        Exits with error message if Docker is not available.
    """
    with exit_on_error():
        return DockerService()


def is_interactive() -> bool:
    return sys.stdin.isatty()


def confirm(prompt: str, default: bool) -> bool:
    """Ask a yes/no question; only an explicit yes proceeds."""
    answer = click.prompt(
        prompt,
        default="y" if default else "n",
        show_default=True,
        err=True,
    )
    return answer.strip().lower() in AFFIRMATIVE_ANSWERS


def print_table(headers: list[str], rows: list[list[Any]],
                tablefmt: str = "simple") -> None:
    """Print a table with project-wide defaults.

    Args:
        headers: Table headers
        rows: Table rows
        tablefmt: Table format (default: "simple")
    """
    table_str = tabulate(rows, headers=headers, tablefmt=tablefmt)
    click.echo(table_str)


# Re-export commonly used functions for convenience
__all__ = [
    'console',
    'exit_on_error',
    'get_project_store',
    'get_docker_service',
    'is_interactive',
    'confirm',
    'print_table',
]
