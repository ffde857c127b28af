# SPDX-License-Identifier: MIT

from typing import Callable

import pendulum
import pytest

from gitask.error import (
    EmptySummary,
    IncompleteChecklist,
    InvalidTransition,
    TemplateNotFound,
    ValidationError,
)
from gitask.model.priority import Priority
from gitask.model.status import Status
from gitask.model.task import Task
from gitask.query.parse import parse
from gitask.service.task import (
    apply_filter,
    done,
    has_incomplete_checklist,
    make_template,
    set_marker,
    start,
    stop,
    validate_task,
)
from gitask.service.template import instantiate
from helpers import NOW


class TestTransitions:
    def test_start_stop_start(self, make_task: Callable[..., Task]) -> None:
        task = start(make_task())
        assert task["status"] == Status.ACTIVE

        task = stop(task)
        assert task["status"] == Status.PAUSED

        assert start(task)["status"] == Status.ACTIVE

    def test_transitions_return_copies(self, make_task: Callable[..., Task]) -> None:
        task = make_task()

        start(task)

        assert task["status"] == Status.PENDING

    @pytest.mark.parametrize(
        "status", [Status.PENDING, Status.ACTIVE, Status.PAUSED, Status.DEFERRED]
    )
    def test_done_from_any_open_status(
        self, make_task: Callable[..., Task], status: Status
    ) -> None:
        task = done(make_task(status=status), NOW)

        assert task["status"] == Status.RESOLVED
        assert task["resolved"] == NOW

    def test_done_twice_is_rejected(self, make_task: Callable[..., Task]) -> None:
        task = done(make_task(), NOW)

        with pytest.raises(InvalidTransition):
            done(task, NOW)

    @pytest.mark.parametrize(
        "status, action",
        [
            (Status.PENDING, stop),
            (Status.ACTIVE, start),
            (Status.RESOLVED, start),
            (Status.TEMPLATE, start),
            (Status.ACTIVE, make_template),
        ],
    )
    def test_invalid_transitions(
        self,
        make_task: Callable[..., Task],
        status: Status,
        action: Callable[[Task], Task],
    ) -> None:
        with pytest.raises(InvalidTransition):
            action(make_task(status=status))

    def test_incomplete_checklist_blocks_done(
        self, make_task: Callable[..., Task]
    ) -> None:
        task = make_task(notes="- [x] buy paint\n- [ ] paint the fence")

        with pytest.raises(IncompleteChecklist):
            done(task, NOW)

    def test_checked_list_allows_done(self, make_task: Callable[..., Task]) -> None:
        task = make_task(notes="- [x] buy paint\n* [x] paint the fence")

        assert done(task, NOW)["status"] == Status.RESOLVED

    def test_checklist_detection(self) -> None:
        assert has_incomplete_checklist("intro\n  * [ ] indented item")
        assert not has_incomplete_checklist("no list here [ ]")
        assert not has_incomplete_checklist("- [X] done")


class TestMarkers:
    def test_marker_status_is_set_directly(self, make_task: Callable[..., Task]) -> None:
        task = set_marker(make_task(status=Status.ACTIVE), Status.DELEGATED)

        assert task["status"] == Status.DELEGATED

    def test_resolved_task_cannot_take_marker(
        self, make_task: Callable[..., Task]
    ) -> None:
        task = make_task(status=Status.RESOLVED, resolved=NOW)

        with pytest.raises(InvalidTransition):
            set_marker(task, Status.DEFERRED)

    def test_lifecycle_status_is_not_a_marker(
        self, make_task: Callable[..., Task]
    ) -> None:
        with pytest.raises(InvalidTransition):
            set_marker(make_task(), Status.ACTIVE)

    @pytest.mark.parametrize("status", [Status.ACTIVE, Status.PAUSED])
    def test_pending_is_not_a_way_out_of_work(
        self, make_task: Callable[..., Task], status: Status
    ) -> None:
        with pytest.raises(InvalidTransition):
            apply_filter(make_task(status=status), parse(["status:pending"], NOW))

    def test_marker_can_return_to_pending(self, make_task: Callable[..., Task]) -> None:
        task = set_marker(make_task(status=Status.DEFERRED), Status.PENDING)

        assert task["status"] == Status.PENDING


class TestValidation:
    def test_blank_summary(self, make_task: Callable[..., Task]) -> None:
        with pytest.raises(EmptySummary):
            validate_task(make_task(summary="   "))

    def test_resolved_time_must_match_status(
        self, make_task: Callable[..., Task]
    ) -> None:
        with pytest.raises(ValidationError):
            validate_task(make_task(status=Status.RESOLVED, resolved=None))
        with pytest.raises(ValidationError):
            validate_task(make_task(resolved=NOW))

    def test_key_must_be_uuid(self, make_task: Callable[..., Task]) -> None:
        with pytest.raises(ValidationError):
            validate_task(make_task(key="not-a-key"))


class TestApplyFilter:
    def test_tags_are_added_and_removed(self, make_task: Callable[..., Task]) -> None:
        task = apply_filter(
            make_task(tags=["home", "errand"]), parse(["+garden", "-errand"], NOW)
        )

        assert task["tags"] == ["garden", "home"]

    def test_project_priority_and_due(self, make_task: Callable[..., Task]) -> None:
        task = apply_filter(
            make_task(), parse(["project:site", "P0", "due:2025-04-01"], NOW)
        )

        assert task["project"] == "site"
        assert task["priority"] == Priority.CRITICAL
        assert task["due"] == pendulum.datetime(2025, 4, 1, tz="UTC")

    def test_excluded_project_is_cleared(self, make_task: Callable[..., Task]) -> None:
        task = apply_filter(make_task(project="old"), parse(["-project:old"], NOW))

        assert task["project"] is None

    def test_range_due_cannot_be_assigned(self, make_task: Callable[..., Task]) -> None:
        with pytest.raises(ValidationError):
            apply_filter(make_task(), parse(["due.before:friday"], NOW))

    def test_note_is_appended(self, make_task: Callable[..., Task]) -> None:
        task = apply_filter(
            make_task(notes="first line"), parse(["/", "call", "back"], NOW)
        )

        assert task["notes"] == "first line\ncall back"

    def test_text_only_replaces_summary_when_asked(
        self, make_task: Callable[..., Task]
    ) -> None:
        filter = parse(["new", "summary"], NOW)

        assert apply_filter(make_task(), filter)["summary"] == "a task"
        assert (
            apply_filter(make_task(), filter, replace_summary=True)["summary"]
            == "new summary"
        )

    def test_status_marker(self, make_task: Callable[..., Task]) -> None:
        task = apply_filter(make_task(), parse(["status:deferred"], NOW))

        assert task["status"] == Status.DEFERRED


class TestInstantiate:
    def test_template_tags_are_extended(self, make_task: Callable[..., Task]) -> None:
        template = make_task(
            summary="weekly review",
            tags=["a", "b"],
            project="x",
            priority=Priority.HIGH,
            notes="- [ ] inbox",
            status=Status.TEMPLATE,
            created=NOW.subtract(days=30),
        )

        task = instantiate(template, parse(["+c", "-a"], NOW), now=NOW)

        assert task["tags"] == ["b", "c"]
        assert task["project"] == "x"
        assert task["priority"] == Priority.HIGH
        assert task["summary"] == "weekly review"
        assert task["notes"] == "- [ ] inbox"
        assert task["status"] == Status.PENDING
        assert task["created"] == NOW
        assert task["key"] != template["key"]
        assert template["tags"] == ["a", "b"]

    def test_override_summary(self, make_task: Callable[..., Task]) -> None:
        template = make_task(summary="weekly review", status=Status.TEMPLATE)

        task = instantiate(template, parse(["monthly", "review"], NOW), now=NOW)

        assert task["summary"] == "monthly review"

    def test_non_template_is_rejected(self, make_task: Callable[..., Task]) -> None:
        with pytest.raises(TemplateNotFound):
            instantiate(make_task(), parse([], NOW), now=NOW, reference="template:1")

    def test_missing_template_is_rejected(self) -> None:
        with pytest.raises(TemplateNotFound):
            instantiate(None, parse([], NOW), now=NOW)
