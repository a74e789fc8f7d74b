"""Terraform command for Dock."""

import click

from dock.cli.helpers import console, exit_on_error, get_docker_service
from dock.core.extension import shared_container_name
from dock.core.terraform import TerraformCoordinator


@click.command()
@click.argument('shared_name')
def terraform(shared_name):
    """Recompose the services of every project merged into SHARED_NAME"""
    docker_service = get_docker_service()
    coordinator = TerraformCoordinator(docker_service)

    with exit_on_error():
        coordinator.terraform(shared_name)

    console.print(f"[green]Services in {shared_container_name(shared_name)} are up to date[/green]")
