"""Command-line interface for Dock."""
