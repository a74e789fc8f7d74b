"""Merging projects into a shared container.

Extending folds a project into a container shared by several projects. The
shared container is never modified in place: the previous instance is
renamed out of the way, a new one is started from the previously committed
image with ``--volumes-from`` the old instance, and only once that launch
succeeds is the new filesystem committed and the old instance removed.

At most one extension of a given shared container may be in flight at a
time. Two concurrent extensions of the same name race on the rename.
"""

import logging
import os
import sys
import uuid
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Set

import yaml

from ..models.labels import SharedLabels
from ..models.store import ConfigurationStore, image_repository_name, sanitize_name
from .compiler import ArgumentCompiler
from .constants import (
    COMPOSE_FILE_NAMES,
    EXTENSION_PLACEHOLDER_COMMAND,
    EXTENSION_TEMP_SUFFIX,
    SHARED_IMAGE_PREFIX,
)
from .container_runner import inside_dock, prepare_image, run_in_place
from .exceptions import ExtensionError, LaunchFailure

logger = logging.getLogger(__name__)


def shared_container_name(identifier: str) -> str:
    """Container name for a shared container identifier such as ``team/env:dev``."""
    return sanitize_name(identifier)


def shared_image_tag(name: str) -> str:
    """Image tag holding the committed state of a shared container."""
    return f"{SHARED_IMAGE_PREFIX}/{image_repository_name(name)}:latest"


def find_compose_file(store: ConfigurationStore) -> Optional[str]:
    """Locate a project's compose file, honouring an explicit ``compose_file``."""
    if store.compose_file:
        return store.compose_file if Path(store.compose_file).is_file() else None
    for file_name in COMPOSE_FILE_NAMES:
        candidate = store.repo_root / file_name
        if candidate.is_file():
            return str(candidate)
    return None


def compose_services(compose_path: str) -> Set[str]:
    """Service names defined in a compose file, empty if it cannot be read."""
    try:
        with open(compose_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read compose file %s: %s", compose_path, e)
        return set()
    services = data.get('services') if isinstance(data, dict) else None
    return set(services or {})


class ExtensionCoordinator:
    """Folds the current project into a shared container."""

    def __init__(
        self,
        store: ConfigurationStore,
        gateway,
        environ: Optional[Mapping[str, str]] = None,
        stdin_isatty: Optional[Callable[[], bool]] = None,
        temp_suffix: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.environ = os.environ if environ is None else environ
        self.stdin_isatty = stdin_isatty or sys.stdin.isatty
        self.temp_suffix = temp_suffix or (lambda: uuid.uuid4().hex[:8])

    def merged_labels(self, name: str) -> SharedLabels:
        """Fold this project into the label set currently on ``name``."""
        store = self.store
        previous = SharedLabels.from_labels(self.gateway.labels(name))

        compose_path = find_compose_file(store)
        if compose_path is None:
            logger.warning(
                "No compose file found for project %s; it will contribute no services",
                store.project_name,
            )
        else:
            defined = compose_services(compose_path)
            for service in store.startup_services:
                if service not in defined:
                    logger.warning("Startup service '%s' is not defined in %s", service, compose_path)

        config_path = str(store.config_path or store.repo_root)
        return previous.merge(
            store.project_name,
            config_path,
            compose_path,
            store.startup_services if compose_path else [],
        )

    def extend(self, identifier: str, command: Optional[List[str]] = None) -> int:
        """Merge the project into the shared container named after ``identifier``.

        Args:
            identifier: Shared container identifier, sanitized into a container name
            command: Command to run in place when already inside a Dock container

        Returns:
            Exit status (0 once the new state is committed)

        Raises:
            ExtensionError: If a new shared container has no image source
            LaunchFailure: If the launch of the new instance fails
        """
        store = self.store
        name = shared_container_name(identifier)
        tag = shared_image_tag(name)
        requested_command = list(command or store.launch_command)

        store.set_container_name(name)
        store.set_workspace_dir(str(store.repo_root))
        store.set_flag('detach', True)
        store.set_launch_command(*EXTENSION_PLACEHOLDER_COMMAND)

        labels = self.merged_labels(name)
        for label in labels.to_labels():
            store.add_label(label)

        if inside_dock(self.environ):
            return run_in_place(requested_command or store.attach_command)

        self._report_leftovers(name)

        temp_name = None
        if self.gateway.exists(name):
            temp_name = f"{name}{EXTENSION_TEMP_SUFFIX}{self.temp_suffix()}"
            # The previously committed image is the authoritative source from here on.
            store.image = tag
            store.dockerfile = None
            store.add_run_flags('--volumes-from', temp_name)
        elif not store.image and not store.dockerfile:
            raise ExtensionError(
                f"Shared container {name} does not exist and project {store.project_name} "
                "declares neither an image nor a dockerfile to create it from"
            )

        spec = ArgumentCompiler(store, environ=self.environ, stdin_isatty=self.stdin_isatty).compile()

        if temp_name is None:
            logger.info("Creating shared container %s for %s", name, store.project_name)
            prepare_image(self.gateway, spec)
        else:
            logger.info("Extending shared container %s with %s", name, store.project_name)
            self.gateway.rename(name, temp_name)

        exit_code = self.gateway.run(spec.run_args)
        if exit_code != 0:
            message = f"Failed to launch shared container {name} (exit status {exit_code})"
            if temp_name:
                message += (
                    f". The previous instance was left as {temp_name}; restore it with "
                    f"'docker rename {temp_name} {name}'"
                )
            raise LaunchFailure(message, exit_code)

        self.gateway.commit(name, tag)
        logger.info("Committed %s as %s", name, tag)
        if temp_name:
            self.gateway.remove(temp_name, force=True)
        return 0

    def _report_leftovers(self, name: str) -> None:
        for leftover in self.gateway.list_names(f"{name}{EXTENSION_TEMP_SUFFIX}"):
            logger.warning(
                "Found %s from an interrupted extension; inspect it and remove it with 'docker rm -f %s'",
                leftover,
                leftover,
            )
