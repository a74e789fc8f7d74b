"""Show command for Dock."""

import click

from dock.cli.helpers import exit_on_error, get_project_store
from dock.core.compiler import ArgumentCompiler


@click.command()
@click.option('--config', '-c', 'config_path', envvar='DOCK_CONFIG', help='Path to the project configuration file')
def show(config_path):
    """Print the docker commands this project would run, without running them"""
    store = get_project_store(config_path)

    with exit_on_error():
        spec = ArgumentCompiler(store).compile()

    if spec.needs_build:
        click.echo(spec.build_command_line())
    elif spec.pull:
        click.echo(f"docker pull {spec.image}")
    click.echo(spec.run_command_line())
