"""Debounced file-system change aggregation using watchfiles.

Design:
- One awatch task per watched root, each tagged with the config(s) it serves
- Only local file-system paths are accepted; other URI schemes are dropped
- Every event lands in the single pending batch and restarts one quiet-period
  timer; when the timer fires the whole batch is handed over and cleared
- Batches from separate quiet periods never merge
- reset() drops the pending batch without delivering it
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote, urlparse

import structlog
from watchfiles import Change, awatch

from testplane.core.formatting import pluralize
from testplane.workspace.models import ChangeEntry, ChangeKind, WatchedRoot, WorkspaceChange

logger = structlog.get_logger()

DEBOUNCE_WINDOW_SEC = 0.5

_CHANGE_KINDS: dict[Change, ChangeKind] = {
    Change.added: "created",
    Change.modified: "changed",
    Change.deleted: "deleted",
}


def to_local_path(uri: str | Path) -> Path | None:
    """Return the local path for ``uri``, or None for non-file schemes."""
    if isinstance(uri, Path):
        return uri
    parsed = urlparse(uri)
    # Single-letter schemes are Windows drive letters, not URI schemes
    if parsed.scheme == "" or len(parsed.scheme) == 1:
        return Path(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return None


@dataclass
class ChangeAggregator:
    """Coalesces bursts of file events into one batched change per quiet period."""

    on_change: Callable[[WorkspaceChange], None]
    debounce_window: float = DEBOUNCE_WINDOW_SEC

    _roots: list[WatchedRoot] = field(default_factory=list, init=False)
    _watch_tasks: list[asyncio.Task[None]] = field(default_factory=list, init=False)
    _stop_event: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _pending: WorkspaceChange | None = field(default=None, init=False)
    _timer: asyncio.TimerHandle | None = field(default=None, init=False)

    @property
    def roots(self) -> list[WatchedRoot]:
        return list(self._roots)

    @property
    def pending(self) -> WorkspaceChange | None:
        return self._pending

    def add_watch_folder(self, root: Path, tag: str) -> None:
        """Begin watching ``root`` recursively. Must be called from a running loop."""
        watched = WatchedRoot(path=root, tag=tag)
        if watched in self._roots:
            return
        self._roots.append(watched)
        self._stop_event.clear()
        self._watch_tasks.append(asyncio.create_task(self._watch_loop(watched)))
        logger.info("watch_folder_added", root=str(root), tag=tag)

    def notify(self, kind: ChangeKind, uri: str | Path, tag: str) -> None:
        """Record one create/change/delete event."""
        path = to_local_path(uri)
        if path is None:
            logger.debug("non_local_change_ignored", uri=str(uri))
            return
        self._change().entries(kind).append(ChangeEntry(path=path, tag=tag))

    def _change(self) -> WorkspaceChange:
        if self._pending is None:
            self._pending = WorkspaceChange()
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_window, self._report_change)
        return self._pending

    def _report_change(self) -> None:
        self._timer = None
        change, self._pending = self._pending, None
        if change is None:
            return
        logger.info(
            "changes_detected",
            created=len(change.created),
            changed=len(change.changed),
            deleted=len(change.deleted),
            summary=pluralize(
                len(change.created) + len(change.changed) + len(change.deleted), "event"
            ),
        )
        self.on_change(change)

    async def _watch_loop(self, root: WatchedRoot) -> None:
        try:
            async for changes in awatch(
                root.path,
                stop_event=self._stop_event,
                debounce=50,
                step=50,
                ignore_permission_denied=True,
            ):
                for change, path_str in changes:
                    self.notify(_CHANGE_KINDS[change], Path(path_str), root.tag)
        except asyncio.CancelledError:
            pass
        except FileNotFoundError:
            logger.warning("watch_root_missing", root=str(root.path))
        except RuntimeError as e:
            logger.error("watcher_error", root=str(root.path), error=str(e))

    def reset(self) -> None:
        """Stop all watches and drop the pending batch without delivering it."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None
        self._stop_event.set()
        for task in self._watch_tasks:
            task.cancel()
        self._watch_tasks = []
        self._roots = []

    async def dispose(self) -> None:
        tasks = list(self._watch_tasks)
        self.reset()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("change_aggregator_disposed")
