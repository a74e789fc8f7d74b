"""Utilities for finding project paths."""

import subprocess
from pathlib import Path
from typing import Optional


class PathFinder:
    """Utility class for locating the project a command runs in."""

    @staticmethod
    def find_repo_root(start: Optional[Path] = None) -> Path:
        """Return the enclosing git repository root, or ``start`` outside a repository."""
        start = Path(start or Path.cwd()).resolve()
        try:
            result = subprocess.run(
                ['git', 'rev-parse', '--show-toplevel'],
                cwd=start,
                capture_output=True,
                text=True
            )
        except FileNotFoundError:
            return start
        if result.returncode == 0 and result.stdout.strip():
            return Path(result.stdout.strip())
        return start
