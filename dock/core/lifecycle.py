"""Decisions about a possibly pre-existing container."""

import logging
from typing import Callable

from ..models.container import ContainerStatus, LifecycleDecision
from .exceptions import ContainerConflict

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str, bool], bool]


class LifecycleController:
    """State machine over a named container.

    ``ABSENT`` proceeds to launch. ``STOPPED`` asks whether to destroy and
    recreate it, ``RUNNING`` whether to attach to it. Without an interactive
    terminal both conflicts fail without touching the container.
    """

    def __init__(self, gateway, confirm: ConfirmFn, interactive: bool = True):
        self.gateway = gateway
        self.confirm = confirm
        self.interactive = interactive

    def destroy(self, name: str) -> None:
        """Stop, kill and force-remove a container, tolerating its absence."""
        logger.info("Destroying container %s", name)
        self.gateway.stop(name)
        self.gateway.kill(name)
        self.gateway.remove(name, force=True)

    def prepare(self, name: str, force: bool = False) -> LifecycleDecision:
        """Resolve the state of ``name`` into a launch or attach decision.

        Raises:
            ContainerConflict: If an existing container blocks the launch
        """
        if force:
            self.destroy(name)
            return LifecycleDecision.LAUNCH

        status = self.gateway.inspect_status(name)
        logger.debug("Container %s is %s", name, status.value)

        if status is ContainerStatus.ABSENT:
            return LifecycleDecision.LAUNCH

        if status is ContainerStatus.STOPPED:
            message = f"Container {name} already exists but is stopped."
            hint = (
                f"Run 'dock run --force' to recreate it, or remove it with 'dock destroy {name}'."
            )
            if self._ask(f"{message} Destroy it and start a new one?", True, name, message, hint):
                self.destroy(name)
                return LifecycleDecision.LAUNCH
        else:
            message = f"Container {name} is already running."
            hint = (
                f"Attach with 'docker exec -it {name} sh', or replace it with 'dock run --force'."
            )
            if self._ask(f"{message} Attach to it?", True, name, message, hint):
                return LifecycleDecision.ATTACH

        raise ContainerConflict(name, message, hint)

    def _ask(self, prompt: str, default: bool, name: str, message: str, hint: str) -> bool:
        if not self.interactive:
            raise ContainerConflict(name, message, hint)
        return self.confirm(prompt, default)
