from unittest.mock import patch

from dock.cli.commands.extend import extend
from dock.cli.commands.terraform import terraform
from dock.models.container import ContainerStatus


class TestExtendCommand:
    """Smoke tests for extend command."""

    @patch('dock.cli.commands.extend.get_docker_service')
    @patch('dock.cli.commands.extend.get_project_store')
    def test_extend_creates_shared_container(self, mock_get_store, mock_get_service,
                                             cli_runner, store, fake_gateway):
        """Test merging a project into a new shared container."""
        mock_get_store.return_value = store
        mock_get_service.return_value = fake_gateway

        result = cli_runner.invoke(extend, ['team/env'])

        assert result.exit_code == 0
        assert 'Merged my-app into team_env' in result.output
        assert "dock terraform team/env" in result.output
        assert fake_gateway.labels('team_env')['projects'] == 'my-app'
        assert ('commit', 'team_env', 'dock-shared/team_env:latest') in fake_gateway.calls

    @patch('dock.core.container_runner.subprocess.run')
    @patch('dock.cli.commands.extend.get_docker_service')
    @patch('dock.cli.commands.extend.get_project_store')
    def test_command_flags_after_shared_name(self, mock_get_store, mock_get_service, mock_run,
                                             cli_runner, store, fake_gateway, monkeypatch):
        """Test that options after SHARED_NAME belong to the command."""
        mock_get_store.return_value = store
        mock_get_service.return_value = fake_gateway
        mock_run.return_value.returncode = 0
        monkeypatch.setenv('INSIDE_DOCK', '1')

        result = cli_runner.invoke(extend, ['env', 'make', '-c', 'ci.mk'])

        assert result.exit_code == 0
        mock_run.assert_called_once_with(['make', '-c', 'ci.mk'])
        mock_get_store.assert_called_once_with(None)

    @patch('dock.cli.commands.extend.get_docker_service')
    @patch('dock.cli.commands.extend.get_project_store')
    def test_extend_failure(self, mock_get_store, mock_get_service,
                            cli_runner, store, fake_gateway):
        """Test that a failed launch is reported with its exit status."""
        mock_get_store.return_value = store
        mock_get_service.return_value = fake_gateway
        fake_gateway.add_container('env')
        fake_gateway.run_exit_code = 125

        result = cli_runner.invoke(extend, ['env'])

        assert result.exit_code == 125
        assert "docker rename env.extending-" in result.output
        assert 'commit' not in fake_gateway.ops()


class TestTerraformCommand:
    """Smoke tests for terraform command."""

    @patch('dock.cli.commands.terraform.get_docker_service')
    def test_terraform_missing_container(self, mock_get_service, cli_runner, fake_gateway):
        """Test terraforming a shared container that does not exist."""
        mock_get_service.return_value = fake_gateway

        result = cli_runner.invoke(terraform, ['env'])

        assert result.exit_code == 1
        assert "dock extend env" in result.output

    @patch('dock.cli.commands.terraform.get_docker_service')
    def test_terraform_success(self, mock_get_service, cli_runner, fake_gateway):
        """Test a successful recomposition."""
        mock_get_service.return_value = fake_gateway
        fake_gateway.add_container('env', ContainerStatus.RUNNING, {
            'compose.p1': '/src/p1/docker-compose.yml',
            'startup_services': 'svc1',
        })
        fake_gateway.compose_configs = {'/src/p1/docker-compose.yml': "services:\n  svc1: {}\n"}

        result = cli_runner.invoke(terraform, ['env'])

        assert result.exit_code == 0
        assert 'Services in env are up to date' in result.output
        assert fake_gateway.calls[-1][2][-3:] == ['up', '-d', 'svc1']
