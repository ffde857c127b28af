# SPDX-License-Identifier: MIT

import pendulum

from gitask.model.priority import Priority
from gitask.model.status import Status
from gitask.model.task import Task

RESOLVED_TASK_COLOR = "grey50"
ACTIVE_TASK_COLOR = "bold green"
PAUSED_TASK_COLOR = "yellow"
OVERDUE_TASK_COLOR = "red"

PRIORITY_COLORS = {
    Priority.CRITICAL: "bold red",
    Priority.HIGH: "orange1",
    Priority.NORMAL: "default",
    Priority.LOW: "grey62",
}


def format_tags(tags: list[str]) -> str:
    return " ".join(f"+{tag}" for tag in tags)


def task_age(task: Task, now: pendulum.DateTime) -> str:
    return now.diff_for_humans(task["created"], absolute=True)


def has_notes(task: Task) -> str:
    return "*" if task["notes"] else " "


def task_color(task: Task, now: pendulum.DateTime) -> str:
    if task["status"] == Status.RESOLVED:
        return RESOLVED_TASK_COLOR
    if task["due"] is not None and task["due"] < now:
        return OVERDUE_TASK_COLOR
    if task["status"] == Status.ACTIVE:
        return ACTIVE_TASK_COLOR
    if task["status"] == Status.PAUSED:
        return PAUSED_TASK_COLOR
    return PRIORITY_COLORS[task["priority"]]
