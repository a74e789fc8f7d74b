import pytest
from unittest.mock import patch

from dock.cli.commands.run import run
from dock.models.container import ContainerStatus


@pytest.fixture
def patched(store, fake_gateway):
    """Run command wired to a project store and an in-memory gateway."""
    with patch('dock.cli.commands.run.get_project_store', return_value=store), \
         patch('dock.cli.commands.run.get_docker_service', return_value=fake_gateway), \
         patch('dock.cli.commands.run.is_interactive', return_value=False):
        yield store, fake_gateway


class TestRunCommand:
    """Smoke tests for run command."""

    def test_run_with_command(self, cli_runner, patched):
        """Test running the project container with a command."""
        _, gateway = patched

        result = cli_runner.invoke(run, ['make', 'test'])

        assert result.exit_code == 0
        assert gateway.ops() == ['run']
        assert gateway.calls[0][1][-3:] == ['alpine:latest', 'make', 'test']

    def test_command_options_are_not_parsed(self, cli_runner, patched):
        """Test that options after the command belong to the command."""
        _, gateway = patched

        result = cli_runner.invoke(run, ['pytest', '-x', '--lf'])

        assert result.exit_code == 0
        assert gateway.calls[0][1][-3:] == ['pytest', '-x', '--lf']

    def test_command_flags_do_not_match_dock_options(self, cli_runner, patched):
        """Test that a command's -f is not taken as --force."""
        _, gateway = patched
        gateway.add_container('my-app', ContainerStatus.RUNNING)

        result = cli_runner.invoke(run, ['grep', '-f', 'patterns.txt'])

        assert result.exit_code == 1
        assert 'already running' in result.output
        assert gateway.calls == []
        assert gateway.inspect_status('my-app') is ContainerStatus.RUNNING

    def test_command_detach_flag_belongs_to_command(self, cli_runner, patched):
        """Test that -d and -t after the command are passed through."""
        _, gateway = patched

        result = cli_runner.invoke(run, ['ls', '-d', '-t'])

        assert result.exit_code == 0
        args = gateway.calls[0][1]
        assert args[-3:] == ['ls', '-d', '-t']
        assert '--detach' not in args
        assert 'Started container' not in result.output

    def test_run_detached(self, cli_runner, patched):
        """Test that --detach starts the container in the background."""
        _, gateway = patched

        result = cli_runner.invoke(run, ['--detach'])

        assert result.exit_code == 0
        assert '--detach' in gateway.calls[0][1]
        assert 'Started container my-app' in result.output

    def test_exit_status_is_propagated(self, cli_runner, patched):
        """Test that the container's exit status becomes the command's."""
        _, gateway = patched
        gateway.run_exit_code = 3

        result = cli_runner.invoke(run, [])

        assert result.exit_code == 3
        assert 'exited with status 3' in result.output

    def test_conflict_without_terminal(self, cli_runner, patched):
        """Test that an existing container fails with a remediation hint."""
        _, gateway = patched
        gateway.add_container('my-app', ContainerStatus.STOPPED)

        result = cli_runner.invoke(run, [])

        assert result.exit_code == 1
        assert 'Error:' in result.output
        assert 'dock run --force' in result.output
        assert gateway.exists('my-app')

    def test_force_replaces_container(self, cli_runner, patched):
        """Test that --force destroys the existing container first."""
        _, gateway = patched
        gateway.add_container('my-app', ContainerStatus.RUNNING)

        result = cli_runner.invoke(run, ['--force'])

        assert result.exit_code == 0
        assert gateway.ops() == ['stop', 'kill', 'remove', 'run']

    def test_missing_required_env(self, cli_runner, patched, monkeypatch):
        """Test that a missing required variable fails before launching."""
        store, gateway = patched
        monkeypatch.delenv('DOCK_TEST_TOKEN', raising=False)
        store.require_env('DOCK_TEST_TOKEN')

        result = cli_runner.invoke(run, [])

        assert result.exit_code == 1
        assert 'DOCK_TEST_TOKEN' in result.output
        assert gateway.calls == []


class TestRunConfiguration:
    """Tests for loading the project configuration."""

    @patch('dock.cli.helpers.PathFinder.find_repo_root')
    def test_invalid_config_reports_location(self, mock_find_root, cli_runner, temp_project_dir):
        """Test that configuration errors are reported with file and line."""
        mock_find_root.return_value = temp_project_dir
        (temp_project_dir / '.dock').write_text('image alpine\nfrobnicate yes\n')

        result = cli_runner.invoke(run, [])

        assert result.exit_code == 1
        assert '.dock:2: frobnicate' in result.output

    @patch('dock.cli.helpers.PathFinder.find_repo_root')
    def test_missing_explicit_config(self, mock_find_root, cli_runner, temp_project_dir):
        """Test that --config must point at an existing file."""
        mock_find_root.return_value = temp_project_dir

        result = cli_runner.invoke(run, ['--config', str(temp_project_dir / 'nope.dock')])

        assert result.exit_code == 1
        assert 'does not exist' in result.output

    @patch('dock.cli.helpers.PathFinder.find_repo_root')
    def test_config_from_environment(self, mock_find_root, cli_runner, temp_project_dir):
        """Test that DOCK_CONFIG selects the configuration file."""
        mock_find_root.return_value = temp_project_dir

        with patch('dock.cli.commands.run.get_docker_service') as mock_service:
            result = cli_runner.invoke(run, [], env={'DOCK_CONFIG': str(temp_project_dir / 'nope.dock')})

        assert result.exit_code == 1
        assert 'nope.dock' in result.output
        mock_service.assert_not_called()
