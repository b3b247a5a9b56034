"""testplane run command - run tests and stream their results."""

import asyncio
import time
from collections import Counter
from pathlib import Path

import click

from testplane.cli.utils import build_controller
from testplane.core.formatting import format_duration, pluralize
from testplane.core.progress import status
from testplane.testing.models import ResultEntry, TestState, TestTreeNode
from testplane.testing.scheduler import RunHandle

_STATE_STYLES = {
    TestState.PASSED: "success",
    TestState.FAILED: "error",
    TestState.TIMED_OUT: "error",
    TestState.SKIPPED: "warning",
}


def _print_transition(node: TestTreeNode, entry: ResultEntry) -> None:
    if not entry.state.is_terminal:
        return
    suffix = f" ({entry.project})" if entry.project else ""
    duration = (
        f" {format_duration(entry.duration_ms / 1000)}" if entry.duration_ms is not None else ""
    )
    label = " > ".join(node.title_path())
    status(f"{label}{suffix}{duration}", style=_STATE_STYLES[entry.state])
    for error in entry.errors:
        for line in error.message.splitlines():
            status(line, indent=4)
        if error.stack_frame:
            status(error.stack_frame, indent=4)


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-k",
    "patterns",
    multiple=True,
    help="Only run nodes whose title matches this regex (repeatable)",
)
@click.option("--project", default=None, help="Only run this named project")
@click.pass_context
def run_command(
    ctx: click.Context,
    path: Path,
    patterns: tuple[str, ...],
    project: str | None,
) -> None:
    """Run tests and print per-test results.

    PATH is the workspace folder (default: current directory). Exits with
    status 1 if any test fails or a test process cannot be started.
    """
    root = path.resolve()
    controller = build_controller(ctx, root)
    controller.on_did_create_run(lambda handle: handle.subscribe(_print_transition))

    async def _run() -> list[RunHandle]:
        try:
            await controller.activate()
            nodes: list[TestTreeNode] | None = None
            if patterns:
                for config_node in controller.tree.config_nodes():
                    await controller.expand(config_node)
                nodes = []
                for pattern in patterns:
                    nodes.extend(n for n in controller.find(pattern) if n not in nodes)
                if not nodes:
                    return []

            if project is None:
                handle = await controller.run(nodes)
                return [handle] if handle is not None else []

            profiles = [p for p in controller.run_profiles if p.project == project]
            if not profiles:
                raise click.BadParameter(f"No config declares project '{project}'")
            handles = []
            for profile in profiles:
                scoped = (
                    None if nodes is None else [n for n in nodes if n.config_path == profile.config_path]
                )
                if scoped == []:
                    continue
                handle = await controller.run(scoped, profile)
                if handle is not None:
                    handles.append(handle)
            return handles
        finally:
            await controller.dispose()

    started = time.monotonic()
    handles = asyncio.run(_run())
    elapsed = time.monotonic() - started

    if not handles:
        status("Nothing to run", style="warning")
        return

    counts: Counter[TestState] = Counter()
    for handle in handles:
        counts.update(entry.state for _, entry in handle.transitions if entry.state.is_terminal)
        for error in handle.errors:
            status(error.message, style="error")

    summary = ", ".join(
        f"{counts[state]} {state}"
        for state in (TestState.PASSED, TestState.FAILED, TestState.TIMED_OUT, TestState.SKIPPED)
        if counts[state]
    )
    total = sum(counts.values())
    status(
        f"{pluralize(total, 'result')}: {summary or 'none'} in {format_duration(elapsed)}",
        style="error" if any(h.failed for h in handles) else "success",
    )
    if any(h.failed for h in handles):
        ctx.exit(1)
