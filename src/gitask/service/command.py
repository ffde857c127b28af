# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from typing import Callable, Optional, Sequence, cast

import pendulum

from gitask.configuration import Configuration
from gitask.error import (
    GitaskError,
    IncompleteChecklist,
    ParseError,
    TemplateNotFound,
    UnknownTaskId,
    ValidationError,
)
from gitask.model.filter import DueOperator, Filter
from gitask.model.priority import Priority
from gitask.model.project import Project
from gitask.model.status import HIDDEN_STATUSES, Status
from gitask.model.task import Task
from gitask.query.filter import filter_tasks
from gitask.query.merge import merge
from gitask.query.parse import has_operators, is_empty, parse
from gitask.repository.context import ContextRepository
from gitask.repository.id_map import allocate, get_id
from gitask.repository.task import TaskRepository
from gitask.service import task as task_service
from gitask.service.template import instantiate
from gitask.template.task import get_task_template
from gitask.time import now_local

logger = logging.getLogger(__name__)


class Workspace:
    """
    Everything one command invocation works against: the configuration,
    the task repository and the stored context.

    Every command parses its own tokens, resolves IDs against the task set
    as loaded for this invocation and leaves the repository committed or
    untouched.
    """

    def __init__(
        self,
        config: Configuration,
        tasks: TaskRepository,
        context: ContextRepository,
        now: Optional[pendulum.DateTime] = None,
        ignore_context: bool = False,
    ) -> None:
        self.config = config
        self.tasks = tasks
        self.context = context
        self._now = now
        self.ignore_context = ignore_context

    @property
    def now(self) -> pendulum.DateTime:
        return self._now or now_local()

    def id_of(self, task: Task) -> Optional[int]:
        return get_id(self.tasks.id_map, task["key"])

    # creation

    def add(self, tokens: Sequence[str]) -> Task:
        filter = self.__parse(tokens)
        if not filter["text_terms"] and filter["template"] is None:
            raise ValidationError("a task summary or template:<id> is required")
        self.__assignable_due(filter, "add")

        modifications = self.__creation_modifications(filter)
        if filter["template"] is not None:
            template_task = self.__get_template(filter["template"])
            task = instantiate(
                template_task, modifications, self.now, f"template:{filter['template']}"
            )
        else:
            task = self.__new_task(filter, modifications)

        id = get_id(allocate(self.tasks.load_all() + [task]), task["key"])
        self.tasks.save(task, f"Added {id}: {task['summary']}")
        self.__commit(f"Added {id}: {task['summary']}")
        return task

    def log(self, tokens: Sequence[str]) -> Task:
        """Record a task that is already done."""
        filter = self.__parse(tokens)
        if not filter["text_terms"]:
            raise ValidationError("a task summary is required")
        self.__assignable_due(filter, "log")

        task = self.__new_task(filter, self.__creation_modifications(filter))
        if task_service.has_incomplete_checklist(task["notes"]):
            raise IncompleteChecklist(task["key"])
        task["status"] = Status.RESOLVED
        task["resolved"] = self.now

        self.tasks.save(task, f"Logged {task['summary']}")
        self.__commit(f"Logged {task['summary']}")
        return task

    def template(self, tokens: Sequence[str]) -> list[Task]:
        filter = self.__parse(tokens)
        if filter["ids"]:
            templates = self.__transition_by_id(
                filter,
                task_service.make_template,
                lambda task: f"Changed {task['summary']} to Template",
                "Changed",
                "to Template",
            )
            return templates

        if not filter["text_terms"]:
            raise ValidationError("task IDs or a template summary are required")
        self.__assignable_due(filter, "template")

        task = self.__new_task(filter, self.__creation_modifications(filter))
        task["status"] = Status.TEMPLATE
        self.tasks.save(task, f"Created template: {task['summary']}")
        self.__commit(f"Created template: {task['summary']}")
        return [task]

    # transitions

    def start(self, tokens: Sequence[str]) -> list[Task]:
        return self.__transition_by_id(
            self.__parse(tokens),
            task_service.start,
            lambda task: f"Started {task['summary']}",
            "Started",
        )

    def stop(self, tokens: Sequence[str]) -> list[Task]:
        return self.__transition_by_id(
            self.__parse(tokens),
            task_service.stop,
            lambda task: f"Stopped {task['summary']}",
            "Stopped",
        )

    def done(self, tokens: Sequence[str]) -> list[Task]:
        now = self.now
        return self.__transition_by_id(
            self.__parse(tokens),
            lambda task: task_service.done(task, now),
            lambda task: f"Resolved {task['summary']}",
            "Resolved",
        )

    def modify(self, tokens: Sequence[str]) -> list[Task]:
        """
        Apply the tokens to the tasks named by ID or, without IDs, to every
        open task matching the context.
        """
        filter = self.__parse(tokens)
        if filter["ids"]:
            targets = self.__get_tasks_by_id(filter["ids"])
        else:
            context = self.context.context
            if context is None or filter["ignore_context"]:
                raise ValidationError("modify needs task IDs or an active context")
            open_tasks = [
                task for task in self.tasks.load_all() if task["status"] != Status.RESOLVED
            ]
            targets = filter_tasks(context, open_tasks, self.tasks.id_map, self.now)

        modifications = deepcopy(filter)
        modifications["ids"] = []
        self.__assignable_due(modifications, "modify")
        modified = []
        try:
            for task in targets:
                updated = task_service.apply_filter(task, modifications)
                self.tasks.save(updated, f"Modified {updated['summary']}")
                modified.append(updated)
        except GitaskError:
            self.tasks.discard()
            raise
        self.__commit(self.__bulk_description("Modified", modified))
        return modified

    def remove(self, tokens: Sequence[str]) -> list[Task]:
        filter = self.__parse(tokens)
        if not filter["ids"]:
            raise ParseError("at least one task ID is required")
        removed = self.__get_tasks_by_id(filter["ids"])
        for task in removed:
            self.tasks.remove(task, f"Removed {task['summary']}")
        self.__commit(self.__bulk_description("Removed", removed))
        return removed

    # context

    def set_context(self, tokens: Sequence[str]) -> Optional[Filter]:
        """`none` clears the context, no tokens reads it, anything else sets it."""
        if list(tokens) == ["none"]:
            self.context.clear()
            return None
        if tokens:
            filter = parse(tokens, self.now)
            filter["ignore_context"] = False
            self.context.set_context(filter)
        return self.context.context

    # history

    def sync(self) -> None:
        self.tasks.sync()

    def undo(self, count: int = 1) -> None:
        self.tasks.undo(count)

    def git(self, arguments: Sequence[str]) -> tuple[int, str]:
        return self.tasks.run_raw(arguments)

    # views

    def next(self, tokens: Sequence[str]) -> list[Task]:
        filter = self.__parse(tokens)
        if filter["ids"]:
            if has_operators(filter) or filter["text_terms"]:
                raise ParseError("task IDs cannot be combined with other filters")
            return self.__get_tasks_by_id(filter["ids"])
        return self.__sort_by_urgency(self.__select(filter))

    def show_open(self, tokens: Sequence[str]) -> list[Task]:
        return self.__sort_by_id(self.__select(self.__parse(tokens)))

    def show_active(self, tokens: Sequence[str]) -> list[Task]:
        return self.__show_status(tokens, Status.ACTIVE)

    def show_paused(self, tokens: Sequence[str]) -> list[Task]:
        return self.__show_status(tokens, Status.PAUSED)

    def show_templates(self, tokens: Sequence[str]) -> list[Task]:
        return self.__show_status(tokens, Status.TEMPLATE)

    def show_resolved(self, tokens: Sequence[str]) -> list[Task]:
        filter = self.__parse(tokens)
        filter["status"] = Status.RESOLVED
        resolved = self.__select(filter)
        return sorted(resolved, key=lambda task: (task["resolved"], task["key"]))

    def show_unorganised(self, tokens: Sequence[str]) -> list[Task]:
        """Open tasks with neither tags nor a project. Context is not applied."""
        filter = self.__parse(tokens)
        if not is_empty(filter):
            raise ParseError("show-unorganised does not take a filter")
        unorganised = [
            task
            for task in self.tasks.load_all()
            if task["status"] not in HIDDEN_STATUSES
            and not task["tags"]
            and task["project"] is None
        ]
        return self.__sort_by_id(unorganised)

    def show_projects(self, tokens: Sequence[str]) -> list[Project]:
        filter = self.__effective(self.__parse(tokens))
        candidates = [
            task
            for task in self.tasks.load_all()
            if task["project"] is not None and task["status"] != Status.TEMPLATE
        ]
        selected = filter_tasks(filter, candidates, self.tasks.id_map, self.now)

        projects: dict[str, Project] = {}
        for task in sorted(selected, key=lambda task: task["created"]):
            name = cast(str, task["project"])
            if name not in projects:
                projects[name] = {
                    "name": name,
                    "tasks": 0,
                    "tasks_resolved": 0,
                    "active": False,
                    "created": task["created"],
                    "resolved": None,
                    "priority": Priority.LOW,
                }
            project = projects[name]
            project["tasks"] += 1
            if task["status"] == Status.RESOLVED:
                project["tasks_resolved"] += 1
                if task["resolved"] is not None and (
                    project["resolved"] is None or task["resolved"] > project["resolved"]
                ):
                    project["resolved"] = task["resolved"]
            else:
                if task["priority"] < project["priority"]:
                    project["priority"] = task["priority"]
            if task["status"] == Status.ACTIVE:
                project["active"] = True

        return [projects[name] for name in sorted(projects)]

    def show_tags(self, tokens: Sequence[str]) -> list[str]:
        tags: set[str] = set()
        for task in self.__select(self.__parse(tokens)):
            tags.update(task["tags"])
        return sorted(tags)

    # helpers

    def __parse(self, tokens: Sequence[str]) -> Filter:
        filter = parse(tokens, self.now)
        if self.ignore_context:
            filter["ignore_context"] = True
        return filter

    def __effective(self, filter: Filter) -> Filter:
        return merge(self.context.context, filter)

    def __select(self, filter: Filter) -> list[Task]:
        """Tasks matching the filter merged with the context."""
        effective = self.__effective(filter)
        candidates = [
            task
            for task in self.tasks.load_all()
            if task["status"] not in HIDDEN_STATUSES
            or task["status"] == effective["status"]
        ]
        return filter_tasks(effective, candidates, self.tasks.id_map, self.now)

    def __show_status(self, tokens: Sequence[str], status: Status) -> list[Task]:
        filter = self.__parse(tokens)
        filter["status"] = status
        return self.__sort_by_id(self.__select(filter))

    def __sort_by_id(self, tasks: list[Task]) -> list[Task]:
        return sorted(tasks, key=lambda task: (task["created"], task["key"]))

    def __sort_by_urgency(self, tasks: list[Task]) -> list[Task]:
        by_priority = sorted(
            tasks, key=lambda task: (task["priority"], task["created"], task["key"])
        )
        active = [task for task in by_priority if task["status"] == Status.ACTIVE]
        rest = [task for task in by_priority if task["status"] != Status.ACTIVE]
        return active + rest

    def __get_tasks_by_id(self, ids: list[int]) -> list[Task]:
        tasks = []
        for id in ids:
            task = self.tasks.get_task_by_id(id)
            if task["key"] not in [existing["key"] for existing in tasks]:
                tasks.append(task)
        return tasks

    def __get_template(self, id: int) -> Task:
        try:
            return self.tasks.get_task_by_id(id)
        except UnknownTaskId as e:
            raise TemplateNotFound(f"template:{id}") from e

    def __new_task(self, filter: Filter, modifications: Filter) -> Task:
        task = get_task_template()
        task["created"] = self.now
        task["summary"] = " ".join(filter["text_terms"])
        task = task_service.apply_filter(task, modifications)
        task_service.validate_task(task)
        return task

    def __creation_modifications(self, filter: Filter) -> Filter:
        """The command's own attributes plus the context's tags, project and priority."""
        modifications = self.__effective(filter)
        modifications["due_constraint"] = deepcopy(filter["due_constraint"])
        modifications["tags_out"] = list(filter["tags_out"])
        modifications["project_out"] = list(filter["project_out"])
        modifications["ids"] = []
        return modifications

    def __assignable_due(self, filter: Filter, command: str) -> None:
        """Commands that set a due date take a single day; `due:today` names one."""
        due_constraint = filter["due_constraint"]
        if due_constraint is None:
            return
        if due_constraint["operator"] == DueOperator.TODAY:
            filter["due_constraint"] = {
                "operator": DueOperator.ON,
                "date": self.now.start_of("day"),
            }
        elif due_constraint["operator"] != DueOperator.ON:
            raise ParseError(
                f"{command} only accepts due:<date>, not due.{due_constraint['operator']}"
            )

    def __transition_by_id(
        self,
        filter: Filter,
        transition: Callable[[Task], Task],
        message: Callable[[Task], str],
        verb: str,
        suffix: str = "",
    ) -> list[Task]:
        """Move the tasks named by ID, then apply the remaining tokens to them."""
        if not filter["ids"]:
            raise ParseError("at least one task ID is required")
        modifications = deepcopy(filter)
        modifications["ids"] = []
        self.__assignable_due(modifications, verb.lower())

        updated_tasks = []
        try:
            for task in self.__get_tasks_by_id(filter["ids"]):
                updated = task_service.apply_filter(transition(task), modifications)
                self.tasks.save(updated, message(updated))
                updated_tasks.append(updated)
        except GitaskError:
            self.tasks.discard()
            raise
        self.__commit(self.__bulk_description(verb, updated_tasks, suffix))
        return updated_tasks

    def __bulk_description(self, verb: str, tasks: list[Task], suffix: str = "") -> str:
        if len(tasks) == 1:
            description = f"{verb} {tasks[0]['summary']}"
        else:
            description = f"{verb} {len(tasks)} tasks"
        return f"{description} {suffix}".rstrip()

    def __commit(self, description: str) -> None:
        commits = self.tasks.commit(description, self.config["bulk_commit_strategy"])
        logger.info("%s (%d commit(s))", description, commits)
        if commits and self.config["sync_after_modify"]:
            self.tasks.sync()
