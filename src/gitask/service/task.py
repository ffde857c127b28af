# SPDX-License-Identifier: MIT

import re
from copy import deepcopy
from typing import Optional

import pendulum

from gitask.error import (
    EmptySummary,
    IncompleteChecklist,
    InvalidTransition,
    ValidationError,
)
from gitask.model.entity_key import is_valid_entity_key
from gitask.model.filter import DueOperator, Filter
from gitask.model.status import MARKER_STATUSES, Status, is_valid_status_transition
from gitask.model.task import Task
from gitask.time import now_local

_UNCHECKED_ITEM = re.compile(r"^\s*[-*]\s+\[ \]", re.MULTILINE)


def has_incomplete_checklist(notes: str) -> bool:
    return _UNCHECKED_ITEM.search(notes) is not None


def validate_task(task: Task) -> None:
    if not is_valid_entity_key(task["key"]):
        raise ValidationError(f"invalid task key '{task['key']}'")
    if not task["summary"].strip():
        raise EmptySummary()
    if (task["status"] == Status.RESOLVED) != (task["resolved"] is not None):
        raise ValidationError(
            f"task {task['key']} must have a resolved time exactly when resolved"
        )


def normalise_task(task: Task) -> None:
    task["summary"] = task["summary"].strip()
    task["tags"] = sorted(set(task["tags"]))
    if task["project"] == "":
        task["project"] = None


def transition(
    task: Task, to_status: Status, now: Optional[pendulum.DateTime] = None
) -> Task:
    """
    Return a copy of the task moved to a new status through the
    transition table. Only start, stop, done and template conversions
    go through here.
    """
    if not is_valid_status_transition(task["status"], to_status):
        raise InvalidTransition(task["status"], to_status)
    if to_status == Status.RESOLVED and has_incomplete_checklist(task["notes"]):
        raise IncompleteChecklist(task["key"])

    updated = deepcopy(task)
    updated["status"] = to_status
    if to_status == Status.RESOLVED:
        updated["resolved"] = now or now_local()
    return updated


def start(task: Task) -> Task:
    return transition(task, Status.ACTIVE)


def stop(task: Task) -> Task:
    return transition(task, Status.PAUSED)


def done(task: Task, now: Optional[pendulum.DateTime] = None) -> Task:
    return transition(task, Status.RESOLVED, now)


def make_template(task: Task) -> Task:
    return transition(task, Status.TEMPLATE)


def set_marker(task: Task, status: Status) -> Task:
    """
    Set one of the informational statuses without transition checks.
    Pending is only reachable this way from another marker.
    """
    if status == Status.PENDING:
        if task["status"] not in MARKER_STATUSES:
            raise InvalidTransition(task["status"], status)
    elif status not in MARKER_STATUSES:
        raise InvalidTransition(task["status"], status)
    if task["status"] in (Status.RESOLVED, Status.TEMPLATE):
        raise InvalidTransition(task["status"], status)
    updated = deepcopy(task)
    updated["status"] = status
    return updated


def apply_filter(task: Task, filter: Filter, replace_summary: bool = False) -> Task:
    """
    Apply the attribute part of a filter as modifications: tags are added
    and removed, project, priority and due replace, a note is appended.
    """
    updated = deepcopy(task)

    for tag in filter["tags_in"]:
        if tag not in updated["tags"]:
            updated["tags"].append(tag)
    updated["tags"] = [tag for tag in updated["tags"] if tag not in filter["tags_out"]]

    if filter["project_in"] is not None:
        updated["project"] = filter["project_in"]
    if updated["project"] in filter["project_out"]:
        updated["project"] = None

    if filter["priority"] is not None:
        updated["priority"] = filter["priority"]

    due_constraint = filter["due_constraint"]
    if due_constraint is not None:
        if due_constraint["operator"] != DueOperator.ON or due_constraint["date"] is None:
            raise ValidationError(
                f"cannot set a due date from due.{due_constraint['operator']}"
            )
        updated["due"] = due_constraint["date"]

    if replace_summary and filter["text_terms"]:
        updated["summary"] = " ".join(filter["text_terms"])

    if filter["note"]:
        if updated["notes"]:
            updated["notes"] += "\n"
        updated["notes"] += filter["note"]

    if filter["status"] is not None and filter["status"] != updated["status"]:
        updated = set_marker(updated, filter["status"])

    normalise_task(updated)
    return updated
