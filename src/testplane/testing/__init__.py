"""Test discovery and run orchestration."""

from testplane.testing.controller import TestController
from testplane.testing.models import (
    Invocation,
    ResultEntry,
    RunProfile,
    TestState,
    TestTreeNode,
)
from testplane.testing.planner import CommandPlanner, Plan
from testplane.testing.process import SubprocessRunner
from testplane.testing.scheduler import RunHandle, RunScheduler
from testplane.testing.tree import TestTree

__all__ = [
    "CommandPlanner",
    "Invocation",
    "Plan",
    "ResultEntry",
    "RunHandle",
    "RunProfile",
    "RunScheduler",
    "SubprocessRunner",
    "TestController",
    "TestState",
    "TestTree",
    "TestTreeNode",
]
