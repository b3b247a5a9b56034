"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (TESTPLANE__SECTION__KEY)
3. Repo YAML (.testplane/config.yaml)
4. Global YAML (~/.config/testplane/config.yaml)
5. Built-in defaults (this file)

Examples:
    TESTPLANE__LOGGING__LEVEL=DEBUG
    TESTPLANE__WATCHER__DEBOUNCE_SEC=0.2
    TESTPLANE__CLI__COMMAND='["node", "node_modules/.bin/playwright"]'
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        TESTPLANE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every reporter event.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class WatcherConfig(BaseModel):
    """Change aggregator configuration.

    Env vars:
        TESTPLANE__WATCHER__DEBOUNCE_SEC: Quiet period before a batch is delivered
    """

    debounce_sec: float = Field(
        default=0.5,
        description="Quiet period after the last filesystem event before the batched "
        "change is delivered. Lower values re-run discovery more often during saves.",
    )
    ignored_dirs: list[str] = Field(
        default_factory=lambda: [
            ".git",
            ".hg",
            ".svn",
            "node_modules",
            ".venv",
            "__pycache__",
            "test-results",
            "playwright-report",
        ],
        description="Directory names never searched for config files.",
    )

    @field_validator("debounce_sec")
    @classmethod
    def validate_debounce(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"debounce_sec must be non-negative, got {v}")
        return v


class CliConfig(BaseModel):
    """External test CLI configuration.

    Env vars:
        TESTPLANE__CLI__COMMAND: JSON list, executable plus leading arguments
    """

    command: list[str] = Field(
        default_factory=lambda: ["npx", "playwright"],
        description="Executable and leading arguments used to invoke the test CLI.",
    )
    config_file_names: list[str] = Field(
        default_factory=lambda: [
            "playwright.config.js",
            "playwright.config.ts",
            "playwright.config.mjs",
            "playwright.config.cjs",
            "playwright.config.mts",
            "playwright.config.cts",
        ],
        description="File names recognised as test configs.",
    )
    extra_args: list[str] = Field(
        default_factory=list,
        description="Arguments appended after '-c <config>' for test invocations "
        "(e.g. a reporter that speaks the event protocol).",
    )

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("command must name an executable")
        return v


class SchedulerConfig(BaseModel):
    """Run scheduler configuration.

    Env vars:
        TESTPLANE__SCHEDULER__TEARDOWN_TIMEOUT_SEC: Grace period after cancel
    """

    teardown_timeout_sec: float | None = Field(
        default=None,
        description="Seconds to wait for the process to finish its teardown after a "
        "cancel before killing it. None waits for teardown to complete.",
    )


class TestPlaneConfig(BaseModel):
    """Root configuration for testplane."""

    __test__ = False

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    cli: CliConfig = Field(default_factory=CliConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
