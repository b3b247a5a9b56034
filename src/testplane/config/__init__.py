"""Config module exports."""

from testplane.config.loader import load_config
from testplane.config.models import (
    CliConfig,
    LoggingConfig,
    SchedulerConfig,
    TestPlaneConfig,
    WatcherConfig,
)

__all__ = [
    "load_config",
    "TestPlaneConfig",
    "LoggingConfig",
    "WatcherConfig",
    "CliConfig",
    "SchedulerConfig",
]
