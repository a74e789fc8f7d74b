"""Container state models."""

from enum import Enum


class ContainerStatus(Enum):
    """Live state of a named container as reported by Docker."""
    ABSENT = "absent"
    STOPPED = "stopped"
    RUNNING = "running"


class LifecycleDecision(Enum):
    """What to do once an existing container has been dealt with."""
    LAUNCH = "launch"
    ATTACH = "attach"
