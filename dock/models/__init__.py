"""Models for Dock."""

from .container import ContainerStatus, LifecycleDecision
from .labels import SharedLabels
from .launch import LaunchSpec
from .store import ConfigurationStore, image_repository_name, sanitize_name

__all__ = [
    'ContainerStatus',
    'LifecycleDecision',
    'SharedLabels',
    'LaunchSpec',
    'ConfigurationStore',
    'image_repository_name',
    'sanitize_name',
]
