"""Compilation of a configuration store into docker invocations."""

import logging
import os
import sys
from typing import Callable, List, Mapping, Optional, Tuple

from ..models.launch import LaunchSpec
from ..models.store import ConfigurationStore, image_repository_name
from .constants import IMAGE_PREFIX, INSIDE_DOCK_ENV, WORKSPACE_DIR_ENV
from .exceptions import MissingRequiredEnv, ValidationError
from .ports import PortShape, classify_port, is_port_bound

logger = logging.getLogger(__name__)


def build_image_tag(container_name: str) -> str:
    """Tag used for images built from a project's Dockerfile."""
    return f"{IMAGE_PREFIX}-{image_repository_name(container_name)}:latest"


class ArgumentCompiler:
    """Turns a populated ConfigurationStore into a LaunchSpec.

    Compilation never talks to Docker. Its only live inputs are the ambient
    environment and the local port probe, both injectable.
    """

    def __init__(
        self,
        store: ConfigurationStore,
        environ: Optional[Mapping[str, str]] = None,
        port_in_use: Optional[Callable[[int], bool]] = None,
        stdin_isatty: Optional[Callable[[], bool]] = None,
    ):
        self.store = store
        self.environ = os.environ if environ is None else environ
        self.port_in_use = port_in_use or is_port_bound
        self.stdin_isatty = stdin_isatty or sys.stdin.isatty

    def compile(self) -> LaunchSpec:
        """Compile the store.

        Returns:
            The launch specification

        Raises:
            MissingRequiredEnv: If a required variable is absent from the environment
            InvalidPortSpec: If a port specification has an unsupported shape
            ValidationError: If the image source is missing or ambiguous
        """
        warnings: List[str] = []

        run_args = self._environment_args()
        image, build_args = self._resolve_source()
        run_args += self._identity_args()
        run_args += self._literal_env_args()
        run_args += self._port_args(warnings)
        run_args += self._volume_and_label_args()
        run_args += self._lifecycle_args()
        run_args.append(image)
        run_args += self.store.launch_command

        return LaunchSpec(
            image=image,
            run_args=run_args,
            build_args=build_args,
            pull=bool(self.store.pull_latest and build_args is None),
            warnings=warnings,
        )

    def _resolve_source(self) -> Tuple[str, Optional[List[str]]]:
        store = self.store
        if store.image and store.dockerfile:
            raise ValidationError('image', "both an image and a dockerfile are configured; choose one")
        if store.image:
            return store.image, None
        if not store.dockerfile:
            raise ValidationError('image', "no image or dockerfile is configured")

        tag = build_image_tag(store.container_name)
        build_args = ['--file', store.dockerfile, '--tag', tag]
        for pair in store.build_args:
            build_args += ['--build-arg', pair]
        if store.pull_latest:
            build_args.append('--pull')
        build_args += store.build_flags
        build_args.append(store.effective_build_context())
        return tag, build_args

    def _environment_args(self) -> List[str]:
        args = []
        for name in self.store.optional_env:
            if name in self.environ:
                args += ['--env', f"{name}={self.environ[name]}"]
        for name in self.store.required_env:
            if name not in self.environ:
                raise MissingRequiredEnv(name)
            args += ['--env', f"{name}={self.environ[name]}"]
        return args

    def _identity_args(self) -> List[str]:
        store = self.store
        args = [
            '--name', store.container_name,
            '--workdir', store.workspace_dir,
            '--detach-keys', store.detach_keys,
        ]
        if store.container_hostname:
            args += ['--hostname', store.container_hostname]
        if store.entrypoint is not None:
            args += ['--entrypoint', store.entrypoint]
        return args

    def _literal_env_args(self) -> List[str]:
        args = []
        for pair in self.store.literal_env:
            args += ['--env', pair]
        if not self.store.dock_in_dock:
            args += ['--env', f"{INSIDE_DOCK_ENV}=1"]
        args += ['--env', f"{WORKSPACE_DIR_ENV}={self.store.workspace_dir}"]
        return args

    def _port_args(self, warnings: List[str]) -> List[str]:
        args = []
        for spec in self.store.exposed_ports:
            shape, host_port = classify_port(spec)
            if shape is PortShape.CONTAINER_ONLY:
                message = f"Ignoring port '{spec}': no host port given"
            elif shape is PortShape.WITH_HOST_ADDRESS:
                message = f"Ignoring port '{spec}': explicit host addresses are not supported"
            elif self.port_in_use(int(host_port)):
                message = f"Ignoring port '{spec}': port {host_port} is already bound on localhost"
            else:
                args += ['--publish', spec]
                continue
            logger.warning(message)
            warnings.append(message)
        return args

    def _volume_and_label_args(self) -> List[str]:
        store = self.store
        args = []
        # Project root goes last so earlier project-specific mounts are not shadowed.
        for volume in [*store.volumes, f"{store.repo_root}:{store.workspace_dir}"]:
            args += ['--volume', volume]
        for label in store.labels:
            args += ['--label', label]
        return args

    def _lifecycle_args(self) -> List[str]:
        store = self.store
        if store.detach:
            args = ['--detach']
        else:
            args = ['--interactive', '--rm']
        if store.force_tty or self.stdin_isatty():
            args.append('--tty')
        if store.privileged:
            args.append('--privileged')
        args += store.run_flags
        return args
