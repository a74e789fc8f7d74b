"""Dock CLI commands."""
