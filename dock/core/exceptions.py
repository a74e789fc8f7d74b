"""Exceptions raised while resolving and launching a project's container."""

from typing import Optional


class DockError(Exception):
    """Base exception for all Dock errors.

    Every DockError carries the exit status the CLI should terminate with.
    """

    exit_code = 1


class ValidationError(DockError):
    """Exception raised for bad or missing arguments to a configuration primitive."""

    def __init__(self, primitive: str, message: str):
        self.primitive = primitive
        super().__init__(f"{primitive}: {message}")


class MissingArgument(ValidationError):
    """Exception raised when a primitive that needs an argument gets none."""

    def __init__(self, primitive: str):
        super().__init__(primitive, "requires an argument")


class EmptyValue(ValidationError):
    """Exception raised when a primitive is given an empty string it cannot accept."""

    def __init__(self, primitive: str):
        super().__init__(primitive, "value must not be empty")


class InvalidValue(ValidationError):
    """Exception raised when a primitive's argument is malformed."""

    pass


class UnknownPrimitive(ValidationError):
    """Exception raised for a statement naming no known primitive."""

    def __init__(self, primitive: str):
        super().__init__(primitive, "unknown configuration primitive")


class ConfigFileError(DockError):
    """Exception raised when the project configuration file cannot be loaded."""

    pass


class MissingRequiredEnv(DockError):
    """Exception raised when a required environment variable is not set."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Required environment variable {name} is not set")


class InvalidPortSpec(DockError):
    """Exception raised for a port specification of unsupported shape."""

    def __init__(self, spec: str):
        self.spec = spec
        super().__init__(f"Invalid port specification '{spec}'")


class ContainerConflict(DockError):
    """Exception raised when an existing container blocks a fresh launch."""

    def __init__(self, name: str, message: str, hint: Optional[str] = None):
        self.name = name
        self.hint = hint
        super().__init__(f"{message}\n{hint}" if hint else message)


class LaunchFailure(DockError):
    """Exception raised when a launched process exits non-zero."""

    def __init__(self, message: str, exit_code: int = 1):
        self.exit_code = exit_code or 1
        super().__init__(message)


class ExtensionError(DockError):
    """Exception raised when a project cannot be merged into a shared container."""

    pass
