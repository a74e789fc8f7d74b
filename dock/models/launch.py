"""Compiled launch specification models."""

import shlex
from typing import List, Optional

from pydantic import BaseModel, Field


class LaunchSpec(BaseModel):
    """Concrete docker invocations produced from a configuration store.

    ``build_args`` holds the tokens following ``docker build`` and is only
    present when the project is built from a Dockerfile. ``run_args`` holds the
    tokens following ``docker run`` and always ends with the image and the
    launch command.
    """
    image: str
    run_args: List[str]
    build_args: Optional[List[str]] = None
    pull: bool = False
    warnings: List[str] = Field(default_factory=list)

    @property
    def needs_build(self) -> bool:
        return self.build_args is not None

    def build_command_line(self) -> Optional[str]:
        """Render the build invocation for display."""
        if self.build_args is None:
            return None
        return shlex.join(['docker', 'build', *self.build_args])

    def run_command_line(self) -> str:
        """Render the run invocation for display."""
        return shlex.join(['docker', 'run', *self.run_args])
