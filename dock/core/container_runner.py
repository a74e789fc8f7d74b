"""Container running functionality."""

import logging
import os
import subprocess
import sys
from typing import Callable, List, Mapping, Optional

from ..models.container import LifecycleDecision
from ..models.launch import LaunchSpec
from ..models.store import ConfigurationStore
from .compiler import ArgumentCompiler
from .constants import INSIDE_DOCK_ENV
from .exceptions import LaunchFailure
from .lifecycle import LifecycleController

logger = logging.getLogger(__name__)


def inside_dock(environ: Mapping[str, str]) -> bool:
    """Whether this process already runs inside a Dock-managed container."""
    return bool(environ.get(INSIDE_DOCK_ENV))


def run_in_place(command: List[str]) -> int:
    """Execute a command directly in the current environment."""
    logger.info("Already inside a Dock container, running %s in place", " ".join(command))
    try:
        return subprocess.run(command).returncode
    except FileNotFoundError as e:
        raise LaunchFailure(f"Command not found: {command[0]}", 127) from e


def prepare_image(gateway, spec: LaunchSpec) -> None:
    """Build or pull the image a launch specification refers to, if needed."""
    if spec.needs_build:
        logger.info("Building %s", spec.image)
        exit_code = gateway.build(spec.build_args)
        if exit_code != 0:
            raise LaunchFailure(f"Failed to build image {spec.image}", exit_code)
    elif spec.pull:
        logger.info("Pulling %s", spec.image)
        exit_code = gateway.pull(spec.image)
        if exit_code != 0:
            raise LaunchFailure(f"Failed to pull image {spec.image}", exit_code)


def launch_container(gateway, spec: LaunchSpec, container_name: str) -> int:
    """Prepare the image and run the container, failing on a non-zero exit."""
    prepare_image(gateway, spec)
    exit_code = gateway.run(spec.run_args)
    if exit_code != 0:
        raise LaunchFailure(f"Container {container_name} exited with status {exit_code}", exit_code)
    return exit_code


class ContainerRunner:
    """Runs a project's container, dealing with any existing one first."""

    def __init__(
        self,
        store: ConfigurationStore,
        gateway,
        lifecycle: LifecycleController,
        environ: Optional[Mapping[str, str]] = None,
        stdin_isatty: Optional[Callable[[], bool]] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.lifecycle = lifecycle
        self.environ = os.environ if environ is None else environ
        self.stdin_isatty = stdin_isatty or sys.stdin.isatty

    def compile(self) -> LaunchSpec:
        return ArgumentCompiler(self.store, environ=self.environ, stdin_isatty=self.stdin_isatty).compile()

    def run(self, command: Optional[List[str]] = None, force: bool = False) -> int:
        """Run the project's container.

        Args:
            command: Command overriding the project's default command
            force: Destroy any existing container first

        Returns:
            Exit status of the launched (or attached) process

        Raises:
            ContainerConflict: If an existing container blocks the launch
            MissingRequiredEnv: If a required variable is missing
            LaunchFailure: If building, pulling or running fails
        """
        store = self.store
        if command:
            store.set_launch_command(*command)

        if inside_dock(self.environ) and not store.dock_in_dock:
            return run_in_place(store.launch_command or store.attach_command)

        decision = self.lifecycle.prepare(store.container_name, force=force)
        if decision is LifecycleDecision.ATTACH:
            logger.info("Attaching to %s", store.container_name)
            return self.gateway.exec_attached(
                store.container_name,
                store.attach_command,
                interactive=True,
                tty=store.force_tty or self.stdin_isatty(),
            )

        return self.launch(self.compile())

    def launch(self, spec: LaunchSpec) -> int:
        """Build or pull the image as needed, then run the container."""
        return launch_container(self.gateway, spec, self.store.container_name)
