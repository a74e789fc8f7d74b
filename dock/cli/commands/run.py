"""Run command for Dock."""

import sys

import click

from dock.cli.helpers import (
    confirm,
    exit_on_error,
    get_docker_service,
    get_project_store,
    is_interactive,
)
from dock.core.container_runner import ContainerRunner
from dock.core.lifecycle import LifecycleController


@click.command(context_settings={'ignore_unknown_options': True, 'allow_interspersed_args': False})
@click.option('--config', '-c', 'config_path', envvar='DOCK_CONFIG', help='Path to the project configuration file')
@click.option('--force', '-f', is_flag=True, help='Destroy any existing container before starting')
@click.option('--detach', '-d', is_flag=True, help='Run the container in the background')
@click.option('--tty', '-t', is_flag=True, help='Allocate a TTY even when stdin is not a terminal')
@click.argument('command', nargs=-1, type=click.UNPROCESSED)
def run(config_path, force, detach, tty, command):
    """Start the project's container, optionally running COMMAND in it"""
    store = get_project_store(config_path)
    with exit_on_error():
        if detach:
            store.set_flag('detach', True)
        if tty:
            store.set_flag('force_tty', True)

    docker_service = get_docker_service()
    lifecycle = LifecycleController(docker_service, confirm, interactive=is_interactive())
    runner = ContainerRunner(store, docker_service, lifecycle)

    with exit_on_error():
        exit_code = runner.run(list(command), force=force)
    if exit_code != 0:
        sys.exit(exit_code)
    if store.detach:
        click.echo(f"Started container {store.container_name}")
