import pytest
from unittest.mock import MagicMock

from dock.core.exceptions import ContainerConflict
from dock.core.lifecycle import LifecycleController
from dock.models.container import ContainerStatus, LifecycleDecision


def make_controller(gateway, answer=None, interactive=True):
    confirm = MagicMock(return_value=answer)
    return LifecycleController(gateway, confirm, interactive=interactive), confirm


class TestLifecycleController:
    """Test cases for LifecycleController."""

    def test_absent_launches(self, fake_gateway):
        """Test that an absent container proceeds straight to launch."""
        controller, confirm = make_controller(fake_gateway)

        assert controller.prepare("app") is LifecycleDecision.LAUNCH
        confirm.assert_not_called()
        assert fake_gateway.calls == []

    def test_force_destroys_unconditionally(self, fake_gateway):
        """Test that force destroys any existing container without asking."""
        fake_gateway.add_container("app", ContainerStatus.RUNNING)
        controller, confirm = make_controller(fake_gateway)

        assert controller.prepare("app", force=True) is LifecycleDecision.LAUNCH
        confirm.assert_not_called()
        assert fake_gateway.ops() == ["stop", "kill", "remove"]
        assert not fake_gateway.exists("app")

    def test_force_on_absent_container_is_tolerated(self, fake_gateway):
        """Test that destroying an absent container is harmless."""
        controller, _ = make_controller(fake_gateway)

        assert controller.prepare("app", force=True) is LifecycleDecision.LAUNCH

    def test_stopped_confirmed_is_recreated(self, fake_gateway):
        """Test that confirming replaces a stopped container."""
        fake_gateway.add_container("app", ContainerStatus.STOPPED)
        controller, confirm = make_controller(fake_gateway, answer=True)

        assert controller.prepare("app") is LifecycleDecision.LAUNCH
        assert "stopped" in confirm.call_args[0][0]
        assert not fake_gateway.exists("app")

    def test_stopped_declined_fails(self, fake_gateway):
        """Test that declining leaves the stopped container alone and fails."""
        fake_gateway.add_container("app", ContainerStatus.STOPPED)
        controller, _ = make_controller(fake_gateway, answer=False)

        with pytest.raises(ContainerConflict, match="dock run --force"):
            controller.prepare("app")
        assert fake_gateway.exists("app")
        assert fake_gateway.calls == []

    def test_running_confirmed_attaches(self, fake_gateway):
        """Test that confirming attaches to a running container."""
        fake_gateway.add_container("app", ContainerStatus.RUNNING)
        controller, confirm = make_controller(fake_gateway, answer=True)

        assert controller.prepare("app") is LifecycleDecision.ATTACH
        assert "Attach" in confirm.call_args[0][0]
        assert fake_gateway.calls == []

    def test_running_declined_fails(self, fake_gateway):
        """Test that declining to attach fails rather than falling through."""
        fake_gateway.add_container("app", ContainerStatus.RUNNING)
        controller, _ = make_controller(fake_gateway, answer=False)

        with pytest.raises(ContainerConflict, match="already running"):
            controller.prepare("app")

    @pytest.mark.parametrize("status", [ContainerStatus.STOPPED, ContainerStatus.RUNNING])
    def test_non_interactive_conflict_has_no_side_effects(self, fake_gateway, status):
        """Test that conflicts without a terminal never mutate Docker state."""
        fake_gateway.add_container("app", status)
        controller, confirm = make_controller(fake_gateway, answer=True, interactive=False)

        with pytest.raises(ContainerConflict) as exc_info:
            controller.prepare("app")

        confirm.assert_not_called()
        assert fake_gateway.calls == []
        assert fake_gateway.inspect_status("app") is status
        assert exc_info.value.hint
