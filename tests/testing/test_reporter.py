"""Tests for reporter stream parsing and event application."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from testplane.testing.models import ResultEntry, TestState, TestTreeNode
from testplane.testing.reporter import (
    EventStreamParser,
    OutputEvent,
    ReporterSession,
    SuiteListEvent,
    TestBeginEvent,
    TestEndEvent,
)
from testplane.testing.tree import TestTree
from testplane.workspace.models import ConfigDescriptor

ROOT = Path("/ws")
CONFIG = ROOT / "playwright.config.js"


def event(name: str, **params: Any) -> str:
    return json.dumps({"event": name, "params": params}) + "\n"


def suite_list(*projects: str) -> str:
    return event(
        "suite-list",
        projects=[
            {
                "name": name,
                "suites": [
                    {
                        "file": "tests/a.spec.ts",
                        "suites": [
                            {
                                "title": "group",
                                "line": 3,
                                "column": 1,
                                "suites": [],
                                "tests": [{"title": "inner", "id": f"{name}-inner", "line": 4, "column": 3}],
                            }
                        ],
                        "tests": [{"title": "first", "id": f"{name}-first", "line": 1, "column": 1}],
                    }
                ],
            }
            for name in projects
        ],
    )


class TestEventStreamParser:
    """Incremental decoding of the event protocol."""

    def test_given_partial_line_when_fed_then_held_until_complete(self) -> None:
        parser = EventStreamParser(ROOT)
        line = event("test-begin", testId="t1")

        assert parser.feed(line[:10]) == []
        assert parser.buffered == line[:10]
        [begin] = parser.feed(line[10:])

        assert begin == TestBeginEvent(test_id="t1")

    def test_given_plain_text_when_fed_then_forwarded_as_stdout(self) -> None:
        parser = EventStreamParser(ROOT)

        events = parser.feed("hello\n{not json\n")

        assert events == [OutputEvent("stdout", "hello\n"), OutputEvent("stdout", "{not json\n")]

    def test_given_unterminated_text_when_closed_then_flushed_verbatim(self) -> None:
        parser = EventStreamParser(ROOT)
        parser.feed("tail")

        assert parser.close() == [OutputEvent("stdout", "tail")]

    def test_given_malformed_event_when_fed_then_dropped(self) -> None:
        parser = EventStreamParser(ROOT)

        assert parser.feed(event("test-end", testId="t1")) == []

    def test_given_non_object_project_when_fed_then_dropped_without_raising(self) -> None:
        parser = EventStreamParser(ROOT)

        assert parser.feed(json.dumps({"event": "suite-list", "params": {"projects": [1]}}) + "\n") == []

    def test_given_suite_list_when_parsed_then_paths_resolved_and_children_ordered(self) -> None:
        parser = EventStreamParser(ROOT)

        [listing] = parser.feed(suite_list("chromium"))

        assert isinstance(listing, SuiteListEvent)
        [project] = listing.projects
        [file] = project.files
        assert file.path == ROOT / "tests" / "a.spec.ts"
        assert file.children is not None
        assert [c.title for c in file.children] == ["first", "group"]
        assert file.children[1].children[0].test_id == "chromium-inner"

    def test_given_failed_test_end_when_parsed_then_error_details_kept(self) -> None:
        parser = EventStreamParser(ROOT)
        raw = event(
            "test-end",
            testId="t1",
            status="failed",
            duration=12,
            errors=[
                {
                    "message": "boom",
                    "location": {"file": "/ws/tests/a.spec.ts", "line": 4, "column": 5},
                    "stack": "Error: boom\n    at /ws/tests/a.spec.ts:4:5\n    at other",
                }
            ],
        )

        [end] = parser.feed(raw)

        assert isinstance(end, TestEndEvent)
        assert end.duration_ms == 12.0
        [error] = end.errors
        assert str(error.location) == "[4:5 - 4:5]"
        assert error.stack_frame == "at /ws/tests/a.spec.ts:4:5"


class TestReporterSession:
    """Events to per-test transitions."""

    def _session(self, mode: str = "run") -> tuple[TestTree, ReporterSession, list[tuple[str, ResultEntry]]]:
        tree = TestTree()
        tree.ensure_config(ConfigDescriptor(CONFIG, ROOT / "tests", ROOT))
        seen: list[tuple[str, ResultEntry]] = []

        def on_transition(node: TestTreeNode, entry: ResultEntry) -> None:
            seen.append((node.title, entry))

        session = ReporterSession(tree, CONFIG, mode, on_transition=on_transition)  # type: ignore[arg-type]
        return tree, session, seen

    def _apply(self, session: ReporterSession, text: str) -> None:
        for item in EventStreamParser(ROOT).feed(text):
            session.apply(item)

    def test_given_run_listing_when_applied_then_enqueued_per_project(self) -> None:
        _, session, seen = self._session()

        self._apply(session, suite_list("chromium", "firefox"))

        assert [(title, e.state, e.project) for title, e in seen] == [
            ("first", TestState.ENQUEUED, "chromium"),
            ("inner", TestState.ENQUEUED, "chromium"),
            ("first", TestState.ENQUEUED, "firefox"),
            ("inner", TestState.ENQUEUED, "firefox"),
        ]

    def test_given_list_mode_when_applied_then_no_transitions(self) -> None:
        tree, session, seen = self._session("list")

        self._apply(session, suite_list("chromium"))

        assert seen == []
        assert [n.title for n in tree.find("^(first|inner)$")] == ["first", "inner"]
        assert session.saw_event

    def test_given_begin_and_end_when_applied_then_started_then_terminal(self) -> None:
        _, session, seen = self._session()

        self._apply(
            session,
            suite_list("chromium")
            + event("test-begin", testId="chromium-first")
            + event("test-end", testId="chromium-first", status="timedOut"),
        )

        assert [e.state for title, e in seen if title == "first"] == [
            TestState.ENQUEUED,
            TestState.STARTED,
            TestState.TIMED_OUT,
        ]
        assert seen[-1][1].project == "chromium"

    def test_given_unknown_status_when_ended_then_failed(self) -> None:
        _, session, seen = self._session()

        self._apply(
            session,
            suite_list("p") + event("test-end", testId="p-first", status="mystery"),
        )

        assert seen[-1][1].state == TestState.FAILED

    def test_given_interrupted_status_when_run_not_cancelled_then_failed(self) -> None:
        _, session, seen = self._session()

        self._apply(session, suite_list("p") + event("test-end", testId="p-first", status="interrupted"))

        assert seen[-1][1].state == TestState.FAILED

    def test_given_interrupted_status_when_run_cancelled_then_skipped(self) -> None:
        tree = TestTree()
        tree.ensure_config(ConfigDescriptor(CONFIG, ROOT / "tests", ROOT))
        seen: list[ResultEntry] = []
        session = ReporterSession(
            tree,
            CONFIG,
            "run",
            on_transition=lambda node, entry: seen.append(entry),
            is_cancelled=lambda: True,
        )

        self._apply(session, suite_list("p") + event("test-end", testId="p-first", status="interrupted"))

        assert seen[-1].state == TestState.SKIPPED

    def test_given_two_errors_in_one_end_when_applied_then_single_failed_entry_carries_both(self) -> None:
        _, session, seen = self._session()
        errors = [
            {"message": "Expected: 2", "location": {"file": "/ws/tests/a.spec.ts", "line": 2, "column": 5}},
            {"message": "Expected: 3", "location": {"file": "/ws/tests/a.spec.ts", "line": 3, "column": 5}},
        ]

        self._apply(
            session,
            suite_list("p") + event("test-end", testId="p-first", status="failed", errors=errors),
        )

        terminal = [e for title, e in seen if title == "first" and e.state == TestState.FAILED]
        assert len(terminal) == 1
        assert [e.message for e in terminal[0].errors] == ["Expected: 2", "Expected: 3"]

    def test_given_started_test_when_cancelled_then_skipped(self) -> None:
        _, session, seen = self._session()
        self._apply(session, suite_list("p") + event("test-begin", testId="p-inner"))

        session.finish(130, cancelled=True)

        assert seen[-1][0] == "inner"
        assert seen[-1][1].state == TestState.SKIPPED

    def test_given_started_test_when_process_dies_then_failed_with_message(self) -> None:
        _, session, seen = self._session()
        self._apply(session, suite_list("p") + event("test-begin", testId="p-inner"))

        session.finish(1)

        entry = seen[-1][1]
        assert entry.state == TestState.FAILED
        assert entry.errors[0].message == (
            "Test process exited with code 1 before the test finished"
        )

    def test_given_unknown_test_id_when_begun_then_ignored(self) -> None:
        _, session, seen = self._session()

        self._apply(session, event("test-begin", testId="ghost"))

        assert seen == []
        assert session.saw_event

    def test_given_output_for_test_when_applied_then_routed_with_node(self) -> None:
        tree = TestTree()
        tree.ensure_config(ConfigDescriptor(CONFIG, ROOT / "tests", ROOT))
        routed: list[tuple[str, str | None]] = []
        session = ReporterSession(
            tree,
            CONFIG,
            "run",
            on_output=lambda e, node: routed.append((e.text, node.title if node else None)),
        )

        self._apply(
            session,
            suite_list("p") + event("stdout-chunk", text="hi\n", testId="p-first") + "plain\n",
        )

        assert routed == [("hi\n", "first"), ("plain\n", None)]
        assert session.saw_event
