"""Parsing and evaluation of .dock configuration files.

A configuration file is an ordered list of primitive invocations, one per
line, tokenised with shell quoting rules::

    # .dock
    image alpine:latest
    container_name my-app
    env_var GREETING=hello
    label owner=$(container_name)
    required_env_var AWS_PROFILE
    publish 8080:80

The file is parsed once into ``Statement`` records and then interpreted in
file order against a ``ConfigurationStore``. A primitive called with
arguments is a command; called without arguments it is a query. Inside an
argument, ``$(primitive)`` expands to the query value at that point in the
file and ``${NAME}`` expands to the ambient environment variable.
"""

import logging
import os
import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional

from ..models.store import ConfigurationStore
from .constants import CONFIG_FILE_NAME, DOCKERFILE_NAME
from .exceptions import ConfigFileError, DockError, InvalidValue, MissingArgument, UnknownPrimitive

logger = logging.getLogger(__name__)

_INTERPOLATION = re.compile(r"\$\(([a-z_]+)\)|\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_TRUE = ('true', 'yes', '1', 'on')
_FALSE = ('false', 'no', '0', 'off')


@dataclass(frozen=True)
class Statement:
    """A single primitive invocation read from a configuration file."""
    name: str
    args: tuple
    line: int


class Primitive(NamedTuple):
    """Command and optional query bound to a primitive name."""
    command: Callable[[ConfigurationStore, List[str]], None]
    query: Optional[Callable[[ConfigurationStore], object]] = None


def _single(setter: str, primitive: str):
    def command(store: ConfigurationStore, args: List[str]) -> None:
        if len(args) > 1:
            raise InvalidValue(primitive, f"takes one argument, got {len(args)}")
        getattr(store, setter)(args[0] if args else None)
    return command


def _many(method: str):
    def command(store: ConfigurationStore, args: List[str]) -> None:
        getattr(store, method)(*args)
    return command


def _flag(flag: str, primitive: str):
    def command(store: ConfigurationStore, args: List[str]) -> None:
        if len(args) != 1:
            raise InvalidValue(primitive, "takes exactly one of true/false")
        value = args[0].lower()
        if value in _TRUE:
            store.set_flag(flag, True)
        elif value in _FALSE:
            store.set_flag(flag, False)
        else:
            raise InvalidValue(primitive, f"expected true or false, got '{args[0]}'")
    return command


def _attr(name: str):
    return lambda store: getattr(store, name)


PRIMITIVES: Dict[str, Primitive] = {
    'image': Primitive(_single('set_image', 'image'), _attr('image')),
    'dockerfile': Primitive(_single('set_dockerfile', 'dockerfile'), _attr('dockerfile')),
    'container_name': Primitive(_single('set_container_name', 'container_name'), _attr('container_name')),
    'container_hostname': Primitive(
        _single('set_container_hostname', 'container_hostname'), _attr('container_hostname')
    ),
    'workspace_path': Primitive(_single('set_workspace_dir', 'workspace_path'), _attr('workspace_dir')),
    'entrypoint': Primitive(_single('set_entrypoint', 'entrypoint'), _attr('entrypoint')),
    'attach_command': Primitive(_many('set_attach_command'), _attr('attach_command')),
    'default_command': Primitive(_many('set_launch_command'), _attr('launch_command')),
    'detach_keys': Primitive(_single('set_detach_keys', 'detach_keys'), _attr('detach_keys')),
    'build_context': Primitive(_single('set_build_context', 'build_context'), _attr('build_context')),
    'compose_file': Primitive(_single('set_compose_file', 'compose_file'), _attr('compose_file')),
    'detach': Primitive(_flag('detach', 'detach'), _attr('detach')),
    'privileged': Primitive(_flag('privileged', 'privileged'), _attr('privileged')),
    'pull_latest': Primitive(_flag('pull_latest', 'pull_latest'), _attr('pull_latest')),
    'dock_in_dock': Primitive(_flag('dock_in_dock', 'dock_in_dock'), _attr('dock_in_dock')),
    'tty': Primitive(_flag('force_tty', 'tty'), _attr('force_tty')),
    'repo_root': Primitive(None, _attr('repo_root')),
    # Accumulating primitives have no query form.
    'volume': Primitive(_many('add_volume')),
    'label': Primitive(_many('add_label')),
    'env_var': Primitive(_many('add_env')),
    'required_env_var': Primitive(_many('require_env')),
    'optional_env_var': Primitive(_many('allow_env')),
    'publish': Primitive(_many('add_port')),
    'build_arg': Primitive(_many('add_build_arg')),
    'build_flags': Primitive(_many('add_build_flags')),
    'run_flags': Primitive(_many('add_run_flags')),
    'startup_services': Primitive(_many('add_startup_services')),
}


def parse_config(text: str) -> List[Statement]:
    """Parse configuration text into statements without evaluating anything.

    Raises:
        ConfigFileError: If a line cannot be tokenised
    """
    statements = []
    pending = ""
    start_line = 0
    for number, raw in enumerate(text.splitlines(), start=1):
        if not pending:
            start_line = number
        if raw.rstrip().endswith('\\'):
            pending += raw.rstrip()[:-1] + " "
            continue
        line = pending + raw
        pending = ""
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError as e:
            raise ConfigFileError(f"line {start_line}: {e}") from e
        if tokens:
            statements.append(Statement(tokens[0], tuple(tokens[1:]), start_line))
    if pending.strip():
        raise ConfigFileError(f"line {start_line}: unterminated line continuation")
    return statements


def _render(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


class ConfigFileEvaluator:
    """Interprets parsed statements against a configuration store, in order."""

    def __init__(self, store: ConfigurationStore, environ: Optional[Mapping[str, str]] = None):
        self.store = store
        self.environ = os.environ if environ is None else environ

    def query(self, name: str):
        """Return the current value of a primitive."""
        primitive = PRIMITIVES.get(name)
        if primitive is None:
            raise UnknownPrimitive(name)
        if primitive.query is None:
            raise MissingArgument(name)
        return primitive.query(self.store)

    def interpolate(self, arg: str) -> str:
        def replace(match):
            if match.group(1):
                return _render(self.query(match.group(1)))
            return self.environ.get(match.group(2), "")
        return _INTERPOLATION.sub(replace, arg)

    def execute(self, statement: Statement) -> None:
        primitive = PRIMITIVES.get(statement.name)
        if primitive is None:
            raise UnknownPrimitive(statement.name)
        args = [self.interpolate(arg) for arg in statement.args]
        if not args and primitive.query is not None:
            value = primitive.query(self.store)
            logger.debug("%s -> %r", statement.name, value)
            return
        if primitive.command is None:
            raise InvalidValue(statement.name, "is read-only")
        primitive.command(self.store, args)

    def evaluate(self, statements: List[Statement], source: str = CONFIG_FILE_NAME) -> ConfigurationStore:
        """Evaluate every statement in order and return the populated store.

        Raises:
            ConfigFileError: Wrapping the first failing statement, with its location
        """
        for statement in statements:
            try:
                self.execute(statement)
            except DockError as e:
                raise ConfigFileError(f"{source}:{statement.line}: {e}") from e
        return self.store


def load_project_config(
    repo_root: Path,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ConfigurationStore:
    """Build the configuration store for a project.

    An explicitly requested config file must exist. Without one, the
    repository's ``.dock`` is used when present and defaults otherwise. When
    neither an image nor a Dockerfile ends up configured, a ``Dockerfile`` at
    the repository root is used.

    Raises:
        ConfigFileError: If the file is missing (explicit path) or invalid
    """
    store = ConfigurationStore.for_project(repo_root)

    if config_path is not None:
        path = Path(config_path)
        if not path.is_absolute():
            path = Path.cwd() / path
        if not path.is_file():
            raise ConfigFileError(f"Configuration file {config_path} does not exist")
    else:
        path = store.repo_root / CONFIG_FILE_NAME
        if not path.is_file():
            logger.info("No %s found in %s, using defaults", CONFIG_FILE_NAME, store.repo_root)
            path = None

    if path is not None:
        store.config_path = path.resolve()
        try:
            text = path.read_text()
        except OSError as e:
            raise ConfigFileError(f"Could not read {path}: {e}") from e
        ConfigFileEvaluator(store, environ).evaluate(parse_config(text), source=str(path))

    if not store.image and not store.dockerfile:
        default_dockerfile = store.repo_root / DOCKERFILE_NAME
        if default_dockerfile.is_file():
            logger.info("Using %s as build source", default_dockerfile)
            store.dockerfile = str(default_dockerfile)

    return store
