"""Utilities for Dock."""

from .path_finder import PathFinder

__all__ = [
    'PathFinder'
]
