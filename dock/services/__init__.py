"""Service layer for abstracting Docker operations."""

from .docker_service import DockerService, ExecOutput
from .exceptions import (
    ServiceError,
    DockerServiceError,
    RuntimeUnavailable,
    ContainerNotFoundError,
)

__all__ = [
    "DockerService",
    "ExecOutput",
    "ServiceError",
    "DockerServiceError",
    "RuntimeUnavailable",
    "ContainerNotFoundError",
]
