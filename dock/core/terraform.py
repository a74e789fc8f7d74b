"""Recomposition of the service topology inside a shared container."""

import logging
import posixpath
import shlex
from typing import Dict, List, Optional, Set, Tuple

import yaml

from ..models.container import ContainerStatus
from ..models.labels import SharedLabels
from .constants import COMPOSE_COMMAND, TERRAFORM_WORKSPACE
from .exceptions import ExtensionError, LaunchFailure
from .extension import shared_container_name

logger = logging.getLogger(__name__)


class TerraformCoordinator:
    """Resolves every merged project's compose file and brings the union up.

    Each run starts from an empty workspace and a container-free shared
    container, so repeated runs converge on the same composition regardless
    of the order projects were merged in.
    """

    def __init__(self, gateway, workspace: str = TERRAFORM_WORKSPACE):
        self.gateway = gateway
        self.workspace = workspace

    def _exec(self, name: str, command: List[str], workdir: Optional[str] = None):
        result = self.gateway.exec_in_container(name, command, workdir=workdir)
        if result.exit_code != 0:
            raise LaunchFailure(
                f"'{shlex.join(command)}' failed in {name}: {result.stderr.strip() or result.stdout.strip()}",
                result.exit_code,
            )
        return result

    def _ensure_running(self, name: str) -> None:
        status = self.gateway.inspect_status(name)
        if status is ContainerStatus.ABSENT:
            raise ExtensionError(
                f"Shared container {name} does not exist. Create it with 'dock extend {name}' first."
            )
        if status is ContainerStatus.STOPPED:
            logger.info("Starting stopped shared container %s", name)
            self.gateway.start(name)

    def cached_file(self, project: str) -> str:
        return posixpath.join(self.workspace, f"{project}.yml")

    def resolve_project(self, name: str, project: str, compose_path: str) -> Tuple[str, Set[str]]:
        """Normalize one project's compose file and cache it in the workspace.

        Returns:
            Tuple of (path of the cached file inside the shared container, service names)
        """
        logger.info("Resolving compose file for %s", project)
        result = self._exec(
            name,
            [*COMPOSE_COMMAND, '-f', compose_path, 'config'],
            workdir=posixpath.dirname(compose_path) or None,
        )
        try:
            definition = yaml.safe_load(result.stdout)
        except yaml.YAMLError as e:
            raise LaunchFailure(f"Resolved compose file for {project} is not valid YAML: {e}") from e
        if not isinstance(definition, dict):
            raise LaunchFailure(f"Resolved compose file for {project} is empty")

        cached = self.cached_file(project)
        self.gateway.write_file(name, cached, yaml.safe_dump(definition, sort_keys=False))
        return cached, set(definition.get('services') or {})

    def terraform(self, identifier: str) -> int:
        """Recompose every merged project's services inside the shared container.

        Returns:
            Exit status of the final ``up``

        Raises:
            ExtensionError: If the shared container does not exist
            LaunchFailure: If any step exits non-zero
        """
        name = shared_container_name(identifier)
        self._ensure_running(name)

        labels = SharedLabels.from_labels(self.gateway.labels(name))

        self._exec(name, ['rm', '-rf', self.workspace])
        self._exec(name, ['mkdir', '-p', self.workspace])

        cached: Dict[str, str] = {}
        defined = set()
        for project in sorted(labels.compose_files):
            cached[project], services = self.resolve_project(name, project, labels.compose_files[project])
            defined |= services

        for service in labels.startup_services:
            if service not in defined:
                logger.warning("Startup service '%s' is not defined by any merged project", service)

        logger.info("Removing containers running inside %s", name)
        self._exec(name, ['sh', '-c', 'docker ps -aq | xargs -r docker rm -f'])

        if not cached:
            logger.warning("No project merged into %s contributes a compose file", name)
            return 0

        compose = [*COMPOSE_COMMAND, '-p', name.lower().replace('.', '_')]
        for project in sorted(cached):
            compose += ['-f', cached[project]]

        exit_code = self.gateway.exec_attached(name, [*compose, 'build'], interactive=False)
        if exit_code != 0:
            raise LaunchFailure(f"Building services in {name} failed", exit_code)

        if not labels.startup_services:
            logger.warning("No startup services declared for %s; nothing to start", name)
            return 0

        exit_code = self.gateway.exec_attached(
            name, [*compose, 'up', '-d', *labels.startup_services], interactive=False
        )
        if exit_code != 0:
            raise LaunchFailure(f"Starting services in {name} failed", exit_code)
        return exit_code
