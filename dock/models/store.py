"""Configuration store accumulated from a project's .dock file."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..core.constants import (
    CONTAINER_NAME_ILLEGAL_CHARS,
    CONTAINER_NAME_PATTERN,
    DEFAULT_ATTACH_COMMAND,
    DEFAULT_DETACH_KEYS,
    DEFAULT_WORKDIR,
    DOCKER_SOCKET,
    ENV_NAME_PATTERN,
    NAME_SUBSTITUTE,
)
from ..core.exceptions import EmptyValue, InvalidValue, MissingArgument

FLAG_NAMES = ('detach', 'privileged', 'pull_latest', 'dock_in_dock', 'force_tty')


def sanitize_name(name: str) -> str:
    """Map an arbitrary identifier onto Docker's legal container name set.

    Illegal characters become ``_``. Leading separators are dropped since a
    container name must start with a letter or digit.
    """
    sanitized = re.sub(CONTAINER_NAME_ILLEGAL_CHARS, NAME_SUBSTITUTE, name)
    sanitized = sanitized.lstrip('_.-')
    return sanitized or 'dock'


def _collapse_separators(match: re.Match) -> str:
    run = match.group()
    if run == '__' or set(run) == {'-'}:
        return run
    return NAME_SUBSTITUTE


def image_repository_name(name: str) -> str:
    """Normalise a name into a single image repository path component.

    Components are lowercase alphanumerics joined by one ``.``, one or two
    ``_`` or a run of ``-``; they never start or end with a separator.
    """
    component = re.sub(r'[^a-z0-9._-]', NAME_SUBSTITUTE, name.lower())
    component = re.sub(r'[._-]{2,}', _collapse_separators, component)
    return component.strip('._-') or 'dock'


def is_valid_env_name(name: str) -> bool:
    return bool(re.match(ENV_NAME_PATTERN, name))


def _require(primitive: str, value: Optional[str], allow_empty: bool = False) -> str:
    if value is None:
        raise MissingArgument(primitive)
    if not allow_empty and value == "":
        raise EmptyValue(primitive)
    return value


def _require_many(primitive: str, values) -> List[str]:
    if not values:
        raise MissingArgument(primitive)
    return list(values)


def _split_pair(primitive: str, pair: str) -> tuple[str, str]:
    name, sep, value = pair.partition('=')
    if not sep or not name:
        raise InvalidValue(primitive, f"expected NAME=value, got '{pair}'")
    return name, value


@dataclass
class ConfigurationStore:
    """Mutable session state for a single invocation.

    Fields are read directly; every mutation goes through a command method so
    that each one is validated on its own. Accumulating commands append in
    call order and never reorder.
    """

    repo_root: Path
    container_name: str
    container_hostname: Optional[str] = None
    image: Optional[str] = None
    dockerfile: Optional[str] = None
    workspace_dir: str = DEFAULT_WORKDIR
    volumes: List[str] = field(default_factory=lambda: [f"{DOCKER_SOCKET}:{DOCKER_SOCKET}"])
    entrypoint: Optional[str] = None
    attach_command: List[str] = field(default_factory=lambda: list(DEFAULT_ATTACH_COMMAND))
    launch_command: List[str] = field(default_factory=list)
    required_env: List[str] = field(default_factory=list)
    optional_env: List[str] = field(default_factory=list)
    literal_env: List[str] = field(default_factory=list)
    exposed_ports: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    detach: bool = False
    privileged: bool = False
    pull_latest: bool = False
    dock_in_dock: bool = False
    force_tty: bool = False
    detach_keys: str = DEFAULT_DETACH_KEYS
    build_args: List[str] = field(default_factory=list)
    build_flags: List[str] = field(default_factory=list)
    build_context: Optional[str] = None
    run_flags: List[str] = field(default_factory=list)
    startup_services: List[str] = field(default_factory=list)
    compose_file: Optional[str] = None
    config_path: Optional[Path] = None

    @classmethod
    def for_project(cls, repo_root: Path) -> 'ConfigurationStore':
        """Create a store with defaults derived from the repository root."""
        repo_root = Path(repo_root).resolve()
        return cls(repo_root=repo_root, container_name=sanitize_name(repo_root.name))

    @property
    def project_name(self) -> str:
        return sanitize_name(self.repo_root.name)

    def resolve_path(self, path: str) -> str:
        """Resolve a path relative to the repository root."""
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.repo_root / candidate
        return str(candidate)

    # Source

    def set_image(self, value: Optional[str]) -> None:
        self.image = _require('image', value)

    def set_dockerfile(self, value: Optional[str]) -> None:
        self.dockerfile = self.resolve_path(_require('dockerfile', value))

    # Identity

    def set_container_name(self, value: Optional[str]) -> None:
        value = _require('container_name', value)
        if not re.match(CONTAINER_NAME_PATTERN, value):
            raise InvalidValue(
                'container_name',
                f"'{value}' may only contain [a-zA-Z0-9_.-] and must start with a letter or digit",
            )
        self.container_name = value

    def set_container_hostname(self, value: Optional[str]) -> None:
        self.container_hostname = _require('container_hostname', value)

    # Filesystem and process

    def set_workspace_dir(self, value: Optional[str]) -> None:
        value = _require('workspace_path', value)
        if not value.startswith('/'):
            raise InvalidValue('workspace_path', f"'{value}' must be an absolute path")
        self.workspace_dir = value

    def add_volume(self, *specs: str) -> None:
        for spec in _require_many('volume', specs):
            parts = spec.split(':')
            if len(parts) not in (2, 3) or not all(parts):
                raise InvalidValue('volume', f"expected host:container[:mode], got '{spec}'")
            host = parts[0]
            if host.startswith(('.', '~')):
                parts[0] = self.resolve_path(host)
            self.volumes.append(':'.join(parts))

    def set_entrypoint(self, value: Optional[str]) -> None:
        self.entrypoint = _require('entrypoint', value, allow_empty=True)

    def set_attach_command(self, *tokens: str) -> None:
        self.attach_command = _require_many('attach_command', tokens)

    def set_launch_command(self, *tokens: str) -> None:
        self.launch_command = _require_many('default_command', tokens)

    # Environment

    def add_env(self, *pairs: str) -> None:
        for pair in _require_many('env_var', pairs):
            name, _ = _split_pair('env_var', pair)
            if not is_valid_env_name(name):
                raise InvalidValue('env_var', f"'{name}' is not a valid environment variable name")
            self.literal_env.append(pair)

    def require_env(self, *names: str) -> None:
        self._add_env_names('required_env_var', self.required_env, names)

    def allow_env(self, *names: str) -> None:
        self._add_env_names('optional_env_var', self.optional_env, names)

    def _add_env_names(self, primitive: str, target: List[str], names) -> None:
        for name in _require_many(primitive, names):
            if not is_valid_env_name(name):
                raise InvalidValue(primitive, f"'{name}' is not a valid environment variable name")
            if name not in target:
                target.append(name)

    # Networking and metadata

    def add_port(self, *specs: str) -> None:
        self.exposed_ports.extend(_require_many('publish', specs))

    def add_label(self, *pairs: str) -> None:
        for pair in _require_many('label', pairs):
            _split_pair('label', pair)
            self.labels.append(pair)

    # Flags

    def set_flag(self, name: str, value: Optional[bool]) -> None:
        if name not in FLAG_NAMES:
            raise InvalidValue(name, "not a boolean flag")
        if value is None:
            raise MissingArgument(name)
        setattr(self, name, bool(value))

    def set_detach_keys(self, value: Optional[str]) -> None:
        self.detach_keys = _require('detach_keys', value)

    def add_run_flags(self, *flags: str) -> None:
        self.run_flags.extend(_require_many('run_flags', flags))

    # Build

    def add_build_arg(self, *pairs: str) -> None:
        for pair in _require_many('build_arg', pairs):
            _split_pair('build_arg', pair)
            self.build_args.append(pair)

    def add_build_flags(self, *flags: str) -> None:
        self.build_flags.extend(_require_many('build_flags', flags))

    def set_build_context(self, value: Optional[str]) -> None:
        self.build_context = self.resolve_path(_require('build_context', value))

    def effective_build_context(self) -> str:
        return self.build_context or str(self.repo_root)

    # Composition

    def add_startup_services(self, *services: str) -> None:
        for service in _require_many('startup_services', services):
            if service not in self.startup_services:
                self.startup_services.append(service)

    def set_compose_file(self, value: Optional[str]) -> None:
        self.compose_file = self.resolve_path(_require('compose_file', value))
