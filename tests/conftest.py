import pytest
from click.testing import CliRunner
import tempfile
from pathlib import Path

from dock.models.container import ContainerStatus
from dock.models.store import ConfigurationStore
from dock.services.docker_service import ExecOutput


class FakeGateway:
    """In-memory stand-in for DockerService that records every call."""

    def __init__(self):
        self.containers = {}
        self.images = set()
        self.files = {}
        self.calls = []
        self.run_exit_code = 0
        self.build_exit_code = 0
        self.pull_exit_code = 0
        self.attached_exit_code = 0
        self.compose_configs = {}
        self.snapshots = []

    def add_container(self, name, status=ContainerStatus.RUNNING, labels=None):
        self.containers[name] = {'status': status, 'labels': dict(labels or {})}

    def inspect_status(self, name):
        container = self.containers.get(name)
        return container['status'] if container else ContainerStatus.ABSENT

    def exists(self, name):
        return name in self.containers

    def labels(self, name):
        container = self.containers.get(name)
        return dict(container['labels']) if container else {}

    def list_names(self, prefix):
        return sorted(n for n in self.containers if n.startswith(prefix))

    def run(self, args):
        self.calls.append(('run', list(args)))
        if self.run_exit_code == 0 and '--detach' in args:
            name = args[args.index('--name') + 1]
            labels = {}
            for i, token in enumerate(args):
                if token == '--label':
                    key, _, value = args[i + 1].partition('=')
                    labels[key] = value
            self.add_container(name, ContainerStatus.RUNNING, labels)
        return self.run_exit_code

    def build(self, args):
        self.calls.append(('build', list(args)))
        return self.build_exit_code

    def pull(self, image):
        self.calls.append(('pull', image))
        return self.pull_exit_code

    def rename(self, old_name, new_name):
        self.calls.append(('rename', old_name, new_name))
        self.containers[new_name] = self.containers.pop(old_name)

    def commit(self, name, image):
        self.calls.append(('commit', name, image))
        self.images.add(image)

    def start(self, name):
        self.calls.append(('start', name))
        self.containers[name]['status'] = ContainerStatus.RUNNING

    def stop(self, name):
        self.calls.append(('stop', name))
        if name in self.containers:
            self.containers[name]['status'] = ContainerStatus.STOPPED

    def kill(self, name):
        self.calls.append(('kill', name))

    def remove(self, name, force=False):
        self.calls.append(('remove', name, force))
        self.containers.pop(name, None)

    def exec_in_container(self, name, command, workdir=None):
        self.calls.append(('exec', name, list(command), workdir))
        if command[:2] == ['rm', '-rf']:
            prefix = command[2].rstrip('/') + '/'
            self.files = {k: v for k, v in self.files.items()
                          if not (k[0] == name and k[1].startswith(prefix))}
        elif command[-1:] == ['config']:
            compose_path = command[command.index('-f') + 1]
            return ExecOutput(0, self.compose_configs.get(compose_path, ''), '')
        return ExecOutput(0, '', '')

    def exec_attached(self, name, command, interactive=True, tty=False, workdir=None):
        self.calls.append(('exec_attached', name, list(command)))
        self.snapshots.append(dict(self.files))
        return self.attached_exit_code

    def write_file(self, name, path, content):
        self.calls.append(('write_file', name, path))
        self.files[(name, path)] = content

    def ops(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def cli_runner():
    """Provides a Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def fake_gateway():
    """Provides an in-memory Docker gateway."""
    return FakeGateway()


@pytest.fixture
def temp_project_dir():
    """Creates a temporary project directory with basic structure."""
    with tempfile.TemporaryDirectory() as tmpdir:
        project_path = Path(tmpdir) / "my-app"
        project_path.mkdir()
        (project_path / "src").mkdir()
        (project_path / "src" / "main.py").write_text("print('Hello, World!')")

        yield project_path


@pytest.fixture
def store(temp_project_dir):
    """Provides a configuration store with an image set."""
    store = ConfigurationStore.for_project(temp_project_dir)
    store.set_image("alpine:latest")
    return store


@pytest.fixture(autouse=True)
def clean_dock_environment(monkeypatch):
    """Make sure tests never see the caller's Dock environment."""
    monkeypatch.delenv("INSIDE_DOCK", raising=False)
    monkeypatch.delenv("DOCK_CONFIG", raising=False)
