"""Projects command for Dock."""

import click

from dock.cli.helpers import exit_on_error, get_docker_service, print_table
from dock.core.extension import shared_container_name
from dock.models.labels import SharedLabels


@click.command()
@click.argument('shared_name')
def projects(shared_name):
    """List the projects merged into the shared container SHARED_NAME"""
    name = shared_container_name(shared_name)
    docker_service = get_docker_service()

    with exit_on_error():
        if not docker_service.exists(name):
            click.echo(f"No shared container named {name}")
            return
        labels = SharedLabels.from_labels(docker_service.labels(name))

    if not labels.projects:
        click.echo(f"No projects merged into {name}")
        return

    rows = [
        [project, labels.configs.get(project, ""), labels.compose_files.get(project, "")]
        for project in labels.projects
    ]
    print_table(["PROJECT", "CONFIG", "COMPOSE FILE"], rows)
    click.echo("")
    click.echo(f"Startup services: {' '.join(labels.startup_services) or '(none)'}")
