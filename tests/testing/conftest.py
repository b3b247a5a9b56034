"""Shared fixtures for controller-level tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path

import pytest
import pytest_asyncio

from fakes.fakecli import FakeCli
from testplane.config.models import SchedulerConfig, TestPlaneConfig
from testplane.testing.controller import TestController

ControllerFactory = Callable[..., TestController]


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    folder = tmp_path / "ws"
    folder.mkdir()
    return folder


@pytest.fixture
def cli(tmp_path: Path) -> FakeCli:
    return FakeCli(tmp_path)


@pytest_asyncio.fixture
async def make_controller(
    workspace: Path, cli: FakeCli
) -> AsyncIterator[ControllerFactory]:
    """Build controllers over the fake CLI; all are disposed after the test."""
    created: list[TestController] = []

    def factory(
        folders: list[Path] | None = None,
        *,
        teardown_timeout: float | None = None,
    ) -> TestController:
        config = TestPlaneConfig(scheduler=SchedulerConfig(teardown_timeout_sec=teardown_timeout))
        controller = TestController(folders or [workspace], cli, config)
        created.append(controller)
        return controller

    yield factory
    for controller in created:
        await controller.dispose()
