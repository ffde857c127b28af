# SPDX-License-Identifier: MIT

from pathlib import Path

import pendulum
import pytest

from gitask import configuration
from gitask.error import (
    IncompleteChecklist,
    InvalidTransition,
    ParseError,
    TemplateNotFound,
    UnknownTaskId,
    ValidationError,
)
from gitask.model.priority import Priority
from gitask.model.status import Status
from gitask.model.task import Task
from gitask.repository.context import ContextRepository
from gitask.repository.task import TaskRepository
from gitask.service.command import Workspace
from helpers import NOW, commit_subjects


def summaries(tasks: list[Task]) -> list[str]:
    return [task["summary"] for task in tasks]


def add_at(workspace: Workspace, tokens: list[str], minutes: int) -> Task:
    workspace._now = NOW.add(minutes=minutes)
    task = workspace.add(tokens)
    workspace._now = NOW
    return task


class TestAdd:
    def test_add_commits_with_the_new_id(
        self, workspace: Workspace, repo_path: Path
    ) -> None:
        task = workspace.add(["Buy", "milk", "+errand", "project:home", "P1"])

        assert task["summary"] == "Buy milk"
        assert task["tags"] == ["errand"]
        assert task["project"] == "home"
        assert task["priority"] == Priority.HIGH
        assert task["created"] == NOW
        assert workspace.id_of(task) == 1
        assert commit_subjects(repo_path) == ["Added 1: Buy milk"]

    def test_add_with_due_and_note(self, workspace: Workspace) -> None:
        task = workspace.add(["Pay", "rent", "due:friday", "/", "standing", "order?"])

        assert task["due"] == pendulum.datetime(2025, 3, 14, tz="UTC")
        assert task["notes"] == "standing order?"

    def test_add_requires_summary(self, workspace: Workspace) -> None:
        with pytest.raises(ValidationError):
            workspace.add(["+errand"])

    def test_add_rejects_due_range(self, workspace: Workspace) -> None:
        with pytest.raises(ParseError):
            workspace.add(["Pay", "rent", "due.before:friday"])

    def test_add_takes_context_attributes(self, workspace: Workspace) -> None:
        workspace.set_context(["+work", "project:site", "-later"])

        task = workspace.add(["Write", "copy"])

        assert task["tags"] == ["work"]
        assert task["project"] == "site"
        assert workspace.next([]) == [task]

    def test_add_from_template(self, workspace: Workspace, repo_path: Path) -> None:
        workspace.template(["Weekly", "review", "+a", "+b", "project:x"])

        task = add_at(workspace, ["template:1", "+c", "-a"], 1)

        assert task["summary"] == "Weekly review"
        assert task["tags"] == ["b", "c"]
        assert task["project"] == "x"
        assert task["status"] == Status.PENDING
        assert commit_subjects(repo_path)[0] == "Added 2: Weekly review"

    def test_add_from_non_template(self, workspace: Workspace) -> None:
        workspace.add(["plain", "task"])

        with pytest.raises(TemplateNotFound):
            workspace.add(["template:1"])
        with pytest.raises(TemplateNotFound):
            workspace.add(["template:9"])

    def test_log_records_resolved_task(self, workspace: Workspace) -> None:
        task = workspace.log(["Called", "plumber"])

        assert task["status"] == Status.RESOLVED
        assert task["resolved"] == NOW
        assert workspace.id_of(task) is None
        assert summaries(workspace.show_resolved([])) == ["Called plumber"]

    def test_log_refuses_open_checklist(self, workspace: Workspace) -> None:
        with pytest.raises(IncompleteChecklist):
            workspace.log(["Chores", "/", "- [ ] dishes"])


class TestTransitions:
    def test_start_stop_done(self, workspace: Workspace, repo_path: Path) -> None:
        workspace.add(["Paint", "fence"])

        assert workspace.start(["1"])[0]["status"] == Status.ACTIVE
        assert workspace.stop(["1"])[0]["status"] == Status.PAUSED
        resolved = workspace.done(["1"])

        assert resolved[0]["status"] == Status.RESOLVED
        assert resolved[0]["resolved"] == NOW
        assert commit_subjects(repo_path) == [
            "Resolved Paint fence",
            "Stopped Paint fence",
            "Started Paint fence",
            "Added 1: Paint fence",
        ]

    def test_done_compacts_ids(self, workspace: Workspace) -> None:
        for minutes, summary in enumerate(["one", "two", "three"]):
            add_at(workspace, [summary], minutes)

        workspace.done(["2"])

        assert summaries(workspace.show_open([])) == ["one", "three"]
        assert workspace.id_of(workspace.show_open([])[1]) == 2

    def test_invalid_transition_changes_nothing(
        self, workspace: Workspace, repo_path: Path
    ) -> None:
        for minutes, summary in enumerate(["one", "two"]):
            add_at(workspace, [summary], minutes)
        workspace.start(["2"])
        before = commit_subjects(repo_path)

        with pytest.raises(InvalidTransition):
            workspace.start(["1", "2"])

        assert commit_subjects(repo_path) == before
        assert not workspace.tasks.has_pending_changes
        assert summaries(workspace.show_active([])) == ["two"]

    def test_unknown_id(self, workspace: Workspace) -> None:
        with pytest.raises(UnknownTaskId):
            workspace.start(["4"])

    def test_transition_applies_trailing_modifications(
        self, workspace: Workspace
    ) -> None:
        workspace.add(["Paint", "fence"])

        task = workspace.start(["1", "+garden", "P0"])[0]

        assert task["tags"] == ["garden"]
        assert task["priority"] == Priority.CRITICAL

    def test_bulk_done_with_single_strategy(
        self,
        task_repository: TaskRepository,
        context_repository: ContextRepository,
        repo_path: Path,
    ) -> None:
        config = configuration.default_configuration()
        config["bulk_commit_strategy"] = "single"
        workspace = Workspace(config, task_repository, context_repository, now=NOW)
        for minutes, summary in enumerate(["one", "two", "three"]):
            add_at(workspace, [summary], minutes)

        workspace.done(["1", "2", "3"])

        assert commit_subjects(repo_path)[0] == "Resolved 3 tasks"
        assert len(commit_subjects(repo_path)) == 4

    def test_template_conversion(self, workspace: Workspace, repo_path: Path) -> None:
        workspace.add(["Weekly", "review"])

        workspace.template(["1"])

        assert summaries(workspace.show_templates([])) == ["Weekly review"]
        assert workspace.next([]) == []
        assert commit_subjects(repo_path)[0] == "Changed Weekly review to Template"


class TestModify:
    def test_modify_by_id(self, workspace: Workspace) -> None:
        workspace.add(["Paint", "fence", "+home"])

        task = workspace.modify(["1", "-home", "+garden", "project:yard", "due:03-20"])[0]

        assert task["tags"] == ["garden"]
        assert task["project"] == "yard"
        assert task["due"] == pendulum.datetime(2025, 3, 20, tz="UTC")

    def test_modify_sets_marker_status(self, workspace: Workspace) -> None:
        workspace.add(["Ask", "Sam"])

        workspace.modify(["1", "status:delegated"])

        assert workspace.show_open([])[0]["status"] == Status.DELEGATED

    def test_modify_cannot_reset_started_task(self, workspace: Workspace) -> None:
        workspace.add(["Ask", "Sam"])
        workspace.start(["1"])

        with pytest.raises(InvalidTransition):
            workspace.modify(["1", "status:pending"])

        assert workspace.show_active([])[0]["summary"] == "Ask Sam"

    def test_modify_without_ids_uses_context(self, workspace: Workspace) -> None:
        for minutes, tokens in enumerate([["a", "+work"], ["b", "+work"], ["c"]]):
            add_at(workspace, tokens, minutes)
        workspace.set_context(["+work"])

        modified = workspace.modify(["P0"])

        assert sorted(summaries(modified)) == ["a", "b"]
        workspace.set_context(["none"])
        priorities = {t["summary"]: t["priority"] for t in workspace.show_open([])}
        assert priorities == {
            "a": Priority.CRITICAL,
            "b": Priority.CRITICAL,
            "c": Priority.NORMAL,
        }

    def test_modify_without_ids_or_context(self, workspace: Workspace) -> None:
        workspace.add(["a"])

        with pytest.raises(ValidationError):
            workspace.modify(["P0"])

    def test_remove(self, workspace: Workspace, repo_path: Path) -> None:
        workspace.add(["Paint", "fence"])

        workspace.remove(["1"])

        assert workspace.show_open([]) == []
        assert commit_subjects(repo_path)[0] == "Removed Paint fence"


class TestContext:
    def test_context_filters_views(self, workspace: Workspace) -> None:
        for minutes, tokens in enumerate([["a", "+work"], ["b", "+home"]]):
            add_at(workspace, tokens, minutes)

        context = workspace.set_context(["+work"])

        assert context is not None
        assert summaries(workspace.show_open([])) == ["a"]
        assert summaries(workspace.show_open(["--"])) == ["a", "b"]

    def test_workspace_can_ignore_context(
        self,
        workspace: Workspace,
        task_repository: TaskRepository,
        context_repository: ContextRepository,
    ) -> None:
        for minutes, tokens in enumerate([["a", "+work"], ["b", "+home"]]):
            add_at(workspace, tokens, minutes)
        workspace.set_context(["+work"])

        ignoring = Workspace(
            configuration.default_configuration(),
            task_repository,
            context_repository,
            now=NOW,
            ignore_context=True,
        )

        assert summaries(ignoring.show_open([])) == ["a", "b"]

    def test_read_and_clear(self, workspace: Workspace) -> None:
        assert workspace.set_context([]) is None

        workspace.set_context(["project:site"])
        current = workspace.set_context([])
        assert current is not None
        assert current["project_in"] == "site"

        assert workspace.set_context(["none"]) is None
        assert workspace.set_context([]) is None


class TestViews:
    def test_next_orders_by_urgency(self, workspace: Workspace) -> None:
        for minutes, tokens in enumerate(
            [["low", "P3"], ["normal"], ["critical", "P0"], ["later", "P0"], ["busy", "P2"]]
        ):
            add_at(workspace, tokens, minutes)
        workspace.start(["5"])

        assert summaries(workspace.next([])) == [
            "busy",
            "critical",
            "later",
            "normal",
            "low",
        ]

    def test_next_with_ids(self, workspace: Workspace) -> None:
        for minutes, summary in enumerate(["one", "two"]):
            add_at(workspace, [summary], minutes)

        assert summaries(workspace.next(["2"])) == ["two"]
        with pytest.raises(ParseError):
            workspace.next(["2", "+work"])

    def test_hidden_statuses(self, workspace: Workspace) -> None:
        for minutes, summary in enumerate(["open", "done", "template"]):
            add_at(workspace, [summary], minutes)
        workspace.done(["2"])
        workspace.template(["2"])

        assert summaries(workspace.show_open([])) == ["open"]
        assert summaries(workspace.show_resolved([])) == ["done"]
        assert summaries(workspace.show_templates([])) == ["template"]

    def test_show_resolved_oldest_first(self, workspace: Workspace) -> None:
        for minutes, summary in enumerate(["one", "two", "three"]):
            add_at(workspace, [summary], minutes)
        for minutes, id in enumerate(["3", "1", "1"]):
            workspace._now = NOW.add(hours=minutes + 1)
            workspace.done([id])

        assert summaries(workspace.show_resolved([])) == ["three", "one", "two"]

    def test_show_paused(self, workspace: Workspace) -> None:
        for minutes, summary in enumerate(["one", "two"]):
            add_at(workspace, [summary], minutes)
        workspace.start(["1", "2"])
        workspace.stop(["2"])

        assert summaries(workspace.show_active([])) == ["one"]
        assert summaries(workspace.show_paused([])) == ["two"]

    def test_show_unorganised_ignores_context(self, workspace: Workspace) -> None:
        for minutes, tokens in enumerate(
            [["tagged", "+work"], ["filed", "project:x"], ["loose"]]
        ):
            add_at(workspace, tokens, minutes)
        workspace.set_context(["+work"])

        assert summaries(workspace.show_unorganised([])) == ["loose"]
        with pytest.raises(ParseError):
            workspace.show_unorganised(["+work"])

    def test_show_projects(self, workspace: Workspace) -> None:
        for minutes, tokens in enumerate(
            [
                ["a", "project:site", "P2"],
                ["b", "project:site", "P1"],
                ["c", "project:site", "P0"],
                ["d", "project:blog"],
            ]
        ):
            add_at(workspace, tokens, minutes)
        workspace.done(["3"])
        workspace.start(["3"])

        projects = workspace.show_projects([])

        assert [project["name"] for project in projects] == ["blog", "site"]
        blog, site = projects
        assert blog["active"] is True
        assert site["tasks"] == 3
        assert site["tasks_resolved"] == 1
        assert site["priority"] == Priority.HIGH
        assert site["created"] == NOW
        assert site["resolved"] == NOW
        assert site["active"] is False

    def test_show_tags(self, workspace: Workspace) -> None:
        for minutes, tokens in enumerate([["a", "+work", "+b"], ["c", "+home"]]):
            add_at(workspace, tokens, minutes)

        assert workspace.show_tags([]) == ["b", "home", "work"]

    def test_due_filters(self, workspace: Workspace) -> None:
        for minutes, tokens in enumerate(
            [["late", "due:yesterday"], ["today", "due:today"], ["later", "due:04-01"], ["never"]]
        ):
            add_at(workspace, tokens, minutes)

        assert summaries(workspace.show_open(["due:overdue"])) == ["late", "today"]
        assert summaries(workspace.show_open(["due:today"])) == ["today"]
        assert summaries(workspace.show_open(["due.before:today"])) == ["late", "today"]
        assert summaries(workspace.show_open(["due.after:tomorrow"])) == ["later"]


class TestHistory:
    def test_undo(self, workspace: Workspace, repo_path: Path) -> None:
        for minutes, summary in enumerate(["one", "two", "three"]):
            add_at(workspace, [summary], minutes)

        workspace.undo(2)

        assert summaries(workspace.show_open([])) == ["one"]
        assert commit_subjects(repo_path) == ["Added 1: one"]

    def test_git_passthrough(self, workspace: Workspace) -> None:
        workspace.add(["one"])

        returncode, output = workspace.git(["log", "--format=%s"])

        assert returncode == 0
        assert output.strip() == "Added 1: one"
