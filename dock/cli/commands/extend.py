"""Extend command for Dock."""

import sys

import click

from dock.cli.helpers import console, exit_on_error, get_docker_service, get_project_store
from dock.core.extension import ExtensionCoordinator, shared_container_name


@click.command(context_settings={'ignore_unknown_options': True, 'allow_interspersed_args': False})
@click.option('--config', '-c', 'config_path', envvar='DOCK_CONFIG', help='Path to the project configuration file')
@click.argument('shared_name')
@click.argument('command', nargs=-1, type=click.UNPROCESSED)
def extend(config_path, shared_name, command):
    """Merge this project into the shared container SHARED_NAME"""
    store = get_project_store(config_path)
    docker_service = get_docker_service()
    coordinator = ExtensionCoordinator(store, docker_service)

    with exit_on_error():
        exit_code = coordinator.extend(shared_name, list(command))
    if exit_code != 0:
        sys.exit(exit_code)

    console.print(
        f"[green]Merged {store.project_name} into {shared_container_name(shared_name)}[/green]"
    )
    console.print(f"Run 'dock terraform {shared_name}' to start its services.")
