"""Main CLI entry point for Dock."""

import logging

import click

from dock import __version__
from .commands.destroy import destroy
from .commands.extend import extend
from .commands.projects import projects
from .commands.run import run
from .commands.show import show
from .commands.terraform import terraform


@click.group()
@click.version_option(__version__, prog_name='dock')
@click.option('--verbose', '-v', is_flag=True, help='Show progress messages')
@click.option('--debug', is_flag=True, help='Show debug messages, including every docker call')
def cli(verbose, debug):
    """Dock - Per-project development containers"""
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')


# Register commands
cli.add_command(run)
cli.add_command(extend)
cli.add_command(terraform)
cli.add_command(destroy)
cli.add_command(show)
cli.add_command(projects)


if __name__ == '__main__':
    cli()
