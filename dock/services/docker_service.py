"""Docker service for abstracting Docker operations."""

import io
import logging
import subprocess
import tarfile
import time
from typing import Dict, List, NamedTuple, Optional

import docker
import docker.errors
from docker.models.containers import Container

from ..models.container import ContainerStatus
from .exceptions import (
    ContainerNotFoundError,
    DockerServiceError,
    RuntimeUnavailable,
)

logger = logging.getLogger(__name__)

DOCKER_BINARY = "docker"


class ExecOutput(NamedTuple):
    """Captured result of a command executed inside a container."""
    exit_code: int
    stdout: str
    stderr: str


def split_image_tag(image: str) -> tuple[str, Optional[str]]:
    """Split ``repo[:tag]`` without mistaking a registry port for a tag."""
    slash_idx = image.rfind("/")
    colon_idx = image.rfind(":")
    if colon_idx > slash_idx:
        return image[:colon_idx], image[colon_idx + 1:]
    return image, None


def _decode(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode('utf-8', errors='replace')
    return str(data)


class DockerService:
    """Service for Docker operations with clean abstractions.

    Short, atomic operations go through the Docker SDK. Operations that hand
    the terminal over to a container process (run, build, pull, attached exec)
    shell out to the docker CLI so stdin/stdout are relayed untouched.
    """

    def __init__(self):
        """Initialize Docker service and test connection."""
        try:
            self.client = docker.from_env()
            self.client.ping()
        except docker.errors.DockerException as e:
            if "connection refused" in str(e).lower() or "cannot connect" in str(e).lower():
                raise RuntimeUnavailable(
                    "Docker daemon is not running. Please start Docker Desktop or the Docker service."
                ) from e
            else:
                raise RuntimeUnavailable(f"Failed to connect to Docker: {e}") from e

    def _find(self, name: str) -> Optional[Container]:
        try:
            return self.client.containers.get(name)
        except docker.errors.NotFound:
            return None
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to inspect container '{name}': {e}") from e

    def _get(self, name: str) -> Container:
        container = self._find(name)
        if container is None:
            raise ContainerNotFoundError(f"Container '{name}' not found")
        return container

    def inspect_status(self, name: str) -> ContainerStatus:
        """Return the live state of a named container."""
        container = self._find(name)
        if container is None:
            return ContainerStatus.ABSENT
        if container.status == 'running':
            return ContainerStatus.RUNNING
        return ContainerStatus.STOPPED

    def exists(self, name: str) -> bool:
        return self._find(name) is not None

    def labels(self, name: str) -> Dict[str, str]:
        """Return a container's labels, or an empty mapping if it does not exist."""
        container = self._find(name)
        if container is None:
            return {}
        return dict(container.labels or {})

    def list_names(self, prefix: str) -> List[str]:
        """List names of all containers (running or not) starting with ``prefix``."""
        try:
            containers = self.client.containers.list(all=True, filters={'name': prefix})
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to list containers: {e}") from e
        return sorted(c.name for c in containers if c.name.startswith(prefix))

    def _run_cli(self, args: List[str]) -> int:
        command = [DOCKER_BINARY, *args]
        logger.debug("Running: %s", " ".join(command))
        try:
            return subprocess.run(command).returncode
        except FileNotFoundError as e:
            raise RuntimeUnavailable(f"'{DOCKER_BINARY}' executable not found in PATH") from e

    def run(self, args: List[str]) -> int:
        """Run ``docker run`` with the given tokens, relaying stdio."""
        return self._run_cli(['run', *args])

    def build(self, args: List[str]) -> int:
        """Run ``docker build`` with the given tokens, relaying output."""
        return self._run_cli(['build', *args])

    def pull(self, image: str) -> int:
        return self._run_cli(['pull', image])

    def exec_attached(
        self,
        name: str,
        command: List[str],
        interactive: bool = True,
        tty: bool = False,
        workdir: Optional[str] = None,
    ) -> int:
        """Execute a command in a running container with the terminal attached."""
        args = ['exec']
        if interactive:
            args.append('--interactive')
        if tty:
            args.append('--tty')
        if workdir:
            args += ['--workdir', workdir]
        return self._run_cli([*args, name, *command])

    def exec_in_container(
        self, name: str, command: List[str], workdir: Optional[str] = None
    ) -> ExecOutput:
        """Execute a command in a running container and capture its output.

        Raises:
            ContainerNotFoundError: If container not found
            DockerServiceError: If execution fails
        """
        container = self._get(name)
        try:
            result = container.exec_run(command, workdir=workdir, demux=True)
        except docker.errors.NotFound as e:
            raise ContainerNotFoundError(f"Container '{name}' not found") from e
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to execute in container: {e}") from e
        stdout, stderr = result.output if result.output else (None, None)
        return ExecOutput(result.exit_code, _decode(stdout), _decode(stderr))

    def write_file(self, name: str, path: str, content: str) -> None:
        """Write a file inside a container.

        Raises:
            ContainerNotFoundError: If container not found
            DockerServiceError: If copy fails
        """
        container = self._get(name)
        data = content.encode('utf-8')

        # Create tar archive in memory
        tar_stream = io.BytesIO()
        with tarfile.open(fileobj=tar_stream, mode='w') as tar:
            info = tarfile.TarInfo(name=path.lstrip('/'))
            info.size = len(data)
            info.mtime = int(time.time())
            tar.addfile(info, io.BytesIO(data))

        tar_stream.seek(0)
        try:
            container.put_archive('/', tar_stream.read())
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to write {path} in container: {e}") from e

    def rename(self, old_name: str, new_name: str) -> None:
        container = self._get(old_name)
        try:
            container.rename(new_name)
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to rename '{old_name}' to '{new_name}': {e}") from e

    def commit(self, name: str, image: str) -> None:
        """Commit a container's filesystem as ``image``."""
        container = self._get(name)
        repository, tag = split_image_tag(image)
        try:
            container.commit(repository=repository, tag=tag)
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to commit '{name}' as {image}: {e}") from e

    def start(self, name: str) -> None:
        container = self._get(name)
        try:
            container.start()
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to start '{name}': {e}") from e

    def _tolerant(self, action: str, name: str, **kwargs) -> None:
        container = self._find(name)
        if container is None:
            logger.debug("Skipping %s of '%s': already gone", action, name)
            return
        try:
            getattr(container, action)(**kwargs)
        except docker.errors.NotFound:
            logger.debug("Skipping %s of '%s': already gone", action, name)
        except docker.errors.APIError as e:
            # 304: already stopped, 409: not running or removal in progress
            if e.status_code in (304, 409):
                logger.debug("Skipping %s of '%s': %s", action, name, e)
                return
            raise DockerServiceError(f"Failed to {action} container '{name}': {e}") from e

    def stop(self, name: str) -> None:
        self._tolerant('stop', name)

    def kill(self, name: str) -> None:
        self._tolerant('kill', name)

    def remove(self, name: str, force: bool = False) -> None:
        self._tolerant('remove', name, force=force)
