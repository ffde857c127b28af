# SPDX-License-Identifier: MIT

from abc import ABC, abstractmethod
from typing import Optional

import pendulum

from gitask.model.filter import DueConstraint, DueOperator, Filter
from gitask.model.id_map import IdMap
from gitask.model.priority import Priority
from gitask.model.status import Status
from gitask.model.task import Task
from gitask.time import is_same_day, now_local


def generate_predicate(
    filter: Filter, id_map: Optional[IdMap] = None, now: Optional[pendulum.DateTime] = None
) -> "Predicate":
    """Build the conjunction of every populated filter field."""
    now = now or now_local()
    predicate = And()
    if filter["ids"]:
        predicate.add_predicate(Ids(filter["ids"], id_map))
    for tag in filter["tags_in"]:
        predicate.add_predicate(Tag(tag))
    for tag in filter["tags_out"]:
        predicate.add_predicate(Not(Tag(tag)))
    if filter["project_in"] is not None:
        predicate.add_predicate(Project(filter["project_in"]))
    for project in filter["project_out"]:
        predicate.add_predicate(Not(Project(project)))
    if filter["priority"] is not None:
        predicate.add_predicate(PriorityEquals(filter["priority"]))
    if filter["status"] is not None:
        predicate.add_predicate(StatusEquals(filter["status"]))
    if filter["due_constraint"] is not None:
        predicate.add_predicate(Due(filter["due_constraint"], now))
    for term in filter["text_terms"]:
        predicate.add_predicate(Text(term))
    return predicate


def evaluate(
    filter: Filter,
    task: Task,
    id_map: Optional[IdMap] = None,
    now: Optional[pendulum.DateTime] = None,
) -> bool:
    return generate_predicate(filter, id_map, now).matches(task)


def filter_tasks(
    filter: Filter,
    tasks: list[Task],
    id_map: Optional[IdMap] = None,
    now: Optional[pendulum.DateTime] = None,
) -> list[Task]:
    return generate_predicate(filter, id_map, now).filter(tasks)


class Predicate(ABC):
    @abstractmethod
    def matches(self, task: Task) -> bool: ...

    def filter(self, tasks: list[Task]) -> list[Task]:
        return [task for task in tasks if self.matches(task)]


class And(Predicate):
    def __init__(self) -> None:
        self.predicates: list[Predicate] = []

    def add_predicate(self, predicate: Predicate) -> None:
        self.predicates.append(predicate)

    def matches(self, task: Task) -> bool:
        return all(predicate.matches(task) for predicate in self.predicates)


class Not(Predicate):
    def __init__(self, predicate: Predicate) -> None:
        self.predicate = predicate

    def matches(self, task: Task) -> bool:
        return not self.predicate.matches(task)


class Ids(Predicate):
    def __init__(self, ids: list[int], id_map: Optional[IdMap]) -> None:
        self.ids = ids
        self.id_map = id_map

    def matches(self, task: Task) -> bool:
        if self.id_map is None:
            return False
        id = self.id_map["real_to_synthetic"].get(task["key"])
        return id is not None and id in self.ids


class Tag(Predicate):
    def __init__(self, tag: str) -> None:
        self.tag = tag

    def matches(self, task: Task) -> bool:
        return self.tag in task["tags"]


class Project(Predicate):
    def __init__(self, project: str) -> None:
        self.project = project

    def matches(self, task: Task) -> bool:
        return task["project"] == self.project


class PriorityEquals(Predicate):
    def __init__(self, priority: Priority) -> None:
        self.priority = priority

    def matches(self, task: Task) -> bool:
        return task["priority"] == self.priority


class StatusEquals(Predicate):
    def __init__(self, status: Status) -> None:
        self.status = status

    def matches(self, task: Task) -> bool:
        return task["status"] == self.status


class Due(Predicate):
    """A task without a due date never satisfies a due constraint."""

    def __init__(self, due_constraint: DueConstraint, now: pendulum.DateTime) -> None:
        self.due_constraint = due_constraint
        self.now = now

    def matches(self, task: Task) -> bool:
        due = task["due"]
        if due is None:
            return False

        reference = self.due_constraint["date"]
        match self.due_constraint["operator"]:
            case DueOperator.OVERDUE:
                return due < self.now and task["status"] != Status.RESOLVED
            case DueOperator.TODAY:
                return is_same_day(due, self.now)
            case DueOperator.ON:
                return reference is not None and is_same_day(due, reference)
            case DueOperator.BEFORE:
                return reference is not None and due <= reference
            case DueOperator.AFTER:
                return reference is not None and due >= reference
        return False


class Text(Predicate):
    def __init__(self, term: str) -> None:
        self.term = term.lower()

    def matches(self, task: Task) -> bool:
        return (
            self.term in task["summary"].lower() or self.term in task["notes"].lower()
        )
