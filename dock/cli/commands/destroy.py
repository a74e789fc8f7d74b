"""Destroy command for Dock."""

import click

from dock.cli.helpers import exit_on_error, get_docker_service, get_project_store
from dock.core.lifecycle import LifecycleController


@click.command()
@click.option('--config', '-c', 'config_path', envvar='DOCK_CONFIG', help='Path to the project configuration file')
@click.argument('name', required=False)
def destroy(config_path, name):
    """Stop and remove a container (defaults to this project's container)"""
    if not name:
        name = get_project_store(config_path).container_name

    docker_service = get_docker_service()
    lifecycle = LifecycleController(docker_service, confirm=lambda prompt, default: False, interactive=False)

    with exit_on_error():
        if not docker_service.exists(name):
            click.echo(f"No container named {name}")
            return
        lifecycle.destroy(name)
    click.echo(f"Removed container: {name}")
