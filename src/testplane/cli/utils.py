"""CLI utilities."""

from pathlib import Path

import click

from testplane.config.loader import load_config
from testplane.core.errors import ConfigError, OwnershipWarning
from testplane.core.logging import configure_logging
from testplane.core.progress import status
from testplane.testing.controller import TestController
from testplane.testing.process import ProcessRunner, SubprocessRunner


def build_controller(ctx: click.Context, root: Path) -> TestController:
    """Load configuration for ``root`` and build a controller for it.

    A ProcessRunner placed in ``ctx.obj["runner"]`` replaces the real CLI.

    Raises:
        click.ClickException: If the configuration is invalid.
    """
    try:
        config = load_config(root)
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    if not ctx.obj.get("verbose"):
        configure_logging(config=config.logging)

    runner: ProcessRunner = ctx.obj.get("runner") or SubprocessRunner(config.cli.command)

    def _warn(warning: OwnershipWarning) -> None:
        status(warning.message, style="warning")

    return TestController([root], runner, config, on_warning=_warn)

