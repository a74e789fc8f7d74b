"""Custom exceptions for service layer."""


class ServiceError(Exception):
    """Base exception for all service-related errors."""

    exit_code = 1


class DockerServiceError(ServiceError):
    """Exception raised for Docker service operations."""

    pass


class RuntimeUnavailable(DockerServiceError):
    """Exception raised when the Docker daemon cannot be reached."""

    pass


class ContainerNotFoundError(DockerServiceError):
    """Exception raised when a Docker container is not found."""

    pass
