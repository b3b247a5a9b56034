"""testplane watch command - keep the test tree current while files change."""

import asyncio
from pathlib import Path

import click

from testplane.cli.utils import build_controller
from testplane.core.progress import status


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.pass_context
def watch_command(ctx: click.Context, path: Path) -> None:
    """Watch the workspace and reprint the test tree after every change.

    PATH is the workspace folder (default: current directory).
    """
    root = path.resolve()
    controller = build_controller(ctx, root)

    async def _watch() -> None:
        changed = asyncio.Event()
        controller.on_did_change_tree(changed.set)
        try:
            await controller.activate(watch=True)
            click.echo(controller.render_tree())
            status("Watching for changes (Ctrl+C to stop)")
            while True:
                await changed.wait()
                changed.clear()
                click.echo()
                click.echo(controller.render_tree())
        finally:
            await controller.dispose()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        status("Stopped watching")
