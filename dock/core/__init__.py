"""Core functionality for Dock."""
