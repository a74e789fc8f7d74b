"""Label bookkeeping for shared containers.

A shared container records every project merged into it purely through its
Docker labels:

- ``dock.<project>`` points at that project's configuration file
- ``compose.<project>`` points at its compose file, when it has one; it is
  written empty otherwise so that a value inherited from the committed image
  is cleared
- ``projects`` and ``startup_services`` are aggregate labels holding a
  sorted, de-duplicated, space separated set

Aggregate labels are always rewritten wholesale. Merging the same project
twice therefore yields the same label values as merging it once.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.constants import (
    COMPOSE_LABEL_PREFIX,
    PROJECT_LABEL_PREFIX,
    PROJECTS_LABEL,
    STARTUP_SERVICES_LABEL,
)


def _split_set(value: Optional[str]) -> List[str]:
    return sorted(set((value or "").split()))


class SharedLabels(BaseModel):
    """Parsed view of a shared container's label set."""
    projects: List[str] = Field(default_factory=list)
    startup_services: List[str] = Field(default_factory=list)
    configs: Dict[str, str] = Field(default_factory=dict)
    compose_files: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_labels(cls, labels: Optional[Dict[str, str]]) -> 'SharedLabels':
        """Build from a container's raw label mapping (``None`` for an absent container)."""
        labels = labels or {}
        configs = {}
        compose_files = {}
        for key, value in labels.items():
            if not value:
                continue
            if key.startswith(PROJECT_LABEL_PREFIX):
                configs[key[len(PROJECT_LABEL_PREFIX):]] = value
            elif key.startswith(COMPOSE_LABEL_PREFIX):
                compose_files[key[len(COMPOSE_LABEL_PREFIX):]] = value
        return cls(
            projects=_split_set(labels.get(PROJECTS_LABEL)),
            startup_services=_split_set(labels.get(STARTUP_SERVICES_LABEL)),
            configs=configs,
            compose_files=compose_files,
        )

    def merge(
        self,
        project: str,
        config_path: str,
        compose_path: Optional[str] = None,
        services: Optional[List[str]] = None,
    ) -> 'SharedLabels':
        """Return a new label set with ``project`` folded in.

        The project's own per-project labels replace any it had before, so a
        project that dropped its compose file stops contributing one.
        """
        configs = dict(self.configs)
        configs[project] = config_path
        compose_files = {k: v for k, v in self.compose_files.items() if k != project}
        if compose_path:
            compose_files[project] = compose_path
        return SharedLabels(
            projects=sorted(set(self.projects) | {project}),
            startup_services=sorted(set(self.startup_services) | set(services or [])),
            configs=configs,
            compose_files=compose_files,
        )

    def to_labels(self) -> List[str]:
        """Serialise to ``key=value`` strings, per-project labels first."""
        labels = []
        for project in sorted(self.configs):
            labels.append(f"{PROJECT_LABEL_PREFIX}{project}={self.configs[project]}")
        for project in sorted(set(self.configs) | set(self.compose_files)):
            labels.append(f"{COMPOSE_LABEL_PREFIX}{project}={self.compose_files.get(project, '')}")
        labels.append(f"{PROJECTS_LABEL}={' '.join(self.projects)}")
        labels.append(f"{STARTUP_SERVICES_LABEL}={' '.join(self.startup_services)}")
        return labels
