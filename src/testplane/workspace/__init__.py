"""Workspace observation: change aggregation and config ownership."""

from testplane.workspace.models import ConfigDescriptor, ProjectDescriptor, WorkspaceChange
from testplane.workspace.registry import ConfigRegistry, find_config_files
from testplane.workspace.watcher import ChangeAggregator

__all__ = [
    "ChangeAggregator",
    "ConfigDescriptor",
    "ConfigRegistry",
    "ProjectDescriptor",
    "WorkspaceChange",
    "find_config_files",
]
