"""testplane discover command - print the test tree."""

import asyncio
from pathlib import Path

import click

from testplane.cli.utils import build_controller
from testplane.core.errors import TestPlaneError
from testplane.core.formatting import pluralize
from testplane.core.progress import spinner, status


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--expand", is_flag=True, help="Also list the suites and tests inside every file")
@click.pass_context
def discover_command(ctx: click.Context, path: Path, expand: bool) -> None:
    """Discover tests and print them as a tree.

    PATH is the workspace folder (default: current directory).
    """
    root = path.resolve()
    controller = build_controller(ctx, root)

    async def _discover() -> tuple[str, int, list[TestPlaneError]]:
        try:
            await controller.activate()
            if expand:
                for config_node in controller.tree.config_nodes():
                    await controller.expand(config_node)
            files = sum(1 for n in controller.tree.walk() if n.kind == "file")
            return controller.render_tree(), files, controller.errors()
        finally:
            await controller.dispose()

    with spinner(f"Discovering tests in {root}"):
        tree, files, errors = asyncio.run(_discover())

    if tree:
        click.echo(tree)
    for error in errors:
        config = error.details.get("config")
        status(f"{config}: {error.message}" if config else error.message, style="error")
    configs = len(controller.registry.configs)
    if files:
        status(f"{pluralize(files, 'file')} in {pluralize(configs, 'config')}", style="success")
    else:
        status("No tests found", style="warning")
