"""Project/config registry.

Resolves which config owns a path and which of its projects apply. The
registry is rebuilt wholesale from listing output on every discovery pass
and keeps no other state between passes.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from testplane.core.errors import DiscoveryError
from testplane.workspace.models import ConfigDescriptor, ProjectDescriptor, WatchedRoot

logger = structlog.get_logger()


def find_config_files(
    workspace_root: Path,
    names: Iterable[str],
    ignored_dirs: Iterable[str] = (),
) -> list[Path]:
    """Walk the workspace and collect config files, pruning ignored directories."""
    wanted = set(names)
    pruned = set(ignored_dirs)
    found: list[Path] = []
    try:
        for dirpath, dirnames, filenames in os.walk(workspace_root):
            dirnames[:] = sorted(d for d in dirnames if d not in pruned)
            for filename in sorted(filenames):
                if filename in wanted:
                    found.append(Path(dirpath) / filename)
    except OSError as e:
        logger.warning("config_scan_failed", root=str(workspace_root), error=str(e))
    return sorted(found)


def normalize(path: Path) -> Path:
    """Collapse ".." and "." segments without touching the filesystem."""
    return Path(os.path.normpath(path))


def is_within(path: Path, root: Path) -> bool:
    """True if ``path`` is ``root`` or lies below it."""
    return path == root or root in path.parents


def parse_list_files_output(
    config_path: Path,
    workspace_folder: Path,
    stdout: str,
) -> ConfigDescriptor:
    """Build a ConfigDescriptor from ``list-files`` JSON output.

    Raises:
        DiscoveryError: If the output is not JSON or reports a config error.
    """
    config = str(config_path)
    try:
        data: Any = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise DiscoveryError.unparsable_output(config, str(e)) from e
    if not isinstance(data, dict):
        raise DiscoveryError.unparsable_output(config, "expected a JSON object")

    if error := data.get("error"):
        raise DiscoveryError.config_error(
            config, str(error.get("message", "unknown error")), error.get("location")
        )

    raw_projects = data.get("projects") or []
    config_dir = config_path.parent
    project_dirs: list[tuple[str, Path]] = []
    files: list[Path] = []
    for raw in raw_projects:
        test_dir = normalize(config_dir / raw.get("testDir", "."))
        project_dirs.append((str(raw.get("name", "")), test_dir))
        for file in raw.get("files", []):
            path = normalize(config_dir / file)
            if path not in files:
                files.append(path)

    if project_dirs:
        root = Path(os.path.commonpath([str(d) for _, d in project_dirs]))
    else:
        root = normalize(config_dir)

    projects = tuple(
        ProjectDescriptor(name=name, test_dir=None if test_dir == root else test_dir)
        for name, test_dir in project_dirs
    )
    return ConfigDescriptor(
        config_path=config_path,
        test_dir=root,
        workspace_folder=workspace_folder,
        projects=projects,
        files=tuple(sorted(files)),
    )


class ConfigRegistry:
    """Lookup from any path to its owning config and candidate projects."""

    def __init__(self) -> None:
        self._configs: dict[Path, ConfigDescriptor] = {}

    @property
    def configs(self) -> list[ConfigDescriptor]:
        return [self._configs[p] for p in sorted(self._configs)]

    def get(self, config_path: Path) -> ConfigDescriptor | None:
        return self._configs.get(config_path)

    def set(self, descriptor: ConfigDescriptor) -> ConfigDescriptor | None:
        """Install a descriptor, returning the one it replaced."""
        previous = self._configs.get(descriptor.config_path)
        self._configs[descriptor.config_path] = descriptor
        return previous

    def remove(self, config_path: Path) -> ConfigDescriptor | None:
        return self._configs.pop(config_path, None)

    def replace_all(self, descriptors: Iterable[ConfigDescriptor]) -> None:
        self._configs = {d.config_path: d for d in descriptors}

    def resolve_owner(self, path: Path) -> ConfigDescriptor | None:
        """Return the config owning ``path``.

        The deepest root test directory containing the path wins. Equally deep
        candidates are ranked by how closely their config file encloses the
        path; a config whose folder does not enclose the path ranks last.
        """
        best: ConfigDescriptor | None = None
        best_rank: tuple[int, int] | None = None
        for descriptor in self.configs:
            depths = [len(r.parts) for r in descriptor.roots() if is_within(path, r)]
            if not depths:
                continue
            enclosing = is_within(path, descriptor.config_dir)
            rank = (max(depths), len(descriptor.config_dir.parts) if enclosing else -1)
            if best_rank is None or rank > best_rank:
                best, best_rank = descriptor, rank
        return best

    def projects_matching(
        self,
        descriptor: ConfigDescriptor,
        path: Path | None = None,
        profile_projects: Iterable[str] | None = None,
    ) -> list[ProjectDescriptor]:
        """Projects of ``descriptor`` applicable to ``path``, in declared order.

        A project applies when its root and the path overlap (either contains
        the other), so folders above the test directory still match. When
        ``profile_projects`` is given the result is narrowed to those names.
        """
        wanted = set(profile_projects) if profile_projects is not None else None
        matching: list[ProjectDescriptor] = []
        for project in descriptor.projects:
            if wanted is not None and project.name not in wanted:
                continue
            if path is not None:
                root = descriptor.project_root(project)
                if not (is_within(path, root) or is_within(root, path)):
                    continue
            matching.append(project)
        return matching

    def watched_roots(self) -> list[WatchedRoot]:
        roots: list[WatchedRoot] = []
        for descriptor in self.configs:
            roots.extend(
                WatchedRoot(path=root, tag=str(descriptor.config_path))
                for root in descriptor.roots()
            )
        return roots
