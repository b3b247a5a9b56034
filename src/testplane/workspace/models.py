"""Workspace models: watched roots, batched changes and config descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# Change Aggregation
# =============================================================================

ChangeKind = Literal["created", "changed", "deleted"]


@dataclass(frozen=True)
class WatchedRoot:
    """A folder being watched plus the tag of the config(s) that care about it."""

    path: Path
    tag: str


@dataclass(frozen=True)
class ChangeEntry:
    path: Path
    tag: str


@dataclass
class WorkspaceChange:
    """One batched change set, delivered once per quiet period."""

    created: list[ChangeEntry] = field(default_factory=list)
    changed: list[ChangeEntry] = field(default_factory=list)
    deleted: list[ChangeEntry] = field(default_factory=list)

    def entries(self, kind: ChangeKind) -> list[ChangeEntry]:
        return getattr(self, kind)  # type: ignore[no-any-return]

    @property
    def is_empty(self) -> bool:
        return not (self.created or self.changed or self.deleted)

    def tags(self) -> set[str]:
        return {e.tag for e in (*self.created, *self.changed, *self.deleted)}


# =============================================================================
# Configs and Projects
# =============================================================================


@dataclass(frozen=True)
class ProjectDescriptor:
    """A named run variant declared by a config.

    ``test_dir`` is only set when the project roots its tests somewhere other
    than the config's root test directory. The implicit project has name "".
    """

    name: str
    test_dir: Path | None = None


@dataclass(frozen=True)
class ConfigDescriptor:
    """A resolved config. Replaced wholesale on every discovery pass."""

    config_path: Path
    test_dir: Path
    workspace_folder: Path
    projects: tuple[ProjectDescriptor, ...] = ()
    files: tuple[Path, ...] = ()

    @property
    def config_dir(self) -> Path:
        return self.config_path.parent

    @property
    def display_path(self) -> str:
        """Config path relative to its workspace folder."""
        try:
            return self.config_path.relative_to(self.workspace_folder).as_posix()
        except ValueError:
            return str(self.config_path)

    @property
    def named_projects(self) -> tuple[ProjectDescriptor, ...]:
        return tuple(p for p in self.projects if p.name)

    def project_root(self, project: ProjectDescriptor) -> Path:
        return project.test_dir or self.test_dir

    def roots(self) -> list[Path]:
        """Every directory whose files this config owns, deduplicated, in order."""
        roots = [self.test_dir]
        for project in self.projects:
            if project.test_dir is not None and project.test_dir not in roots:
                roots.append(project.test_dir)
        return roots

