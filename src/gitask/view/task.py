# SPDX-License-Identifier: MIT

from typing import Callable, Optional

import pendulum
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gitask.model.task import Task
from gitask.time import (
    datetime_to_display_local_date_str,
    datetime_to_display_local_date_str_optional,
    now_local,
)
from gitask.view.header import header
from gitask.view.util import format_tags, has_notes, task_age, task_color

DEFAULT_COLUMNS = [
    "id",
    "priority",
    "tags",
    "project",
    "summary",
    "notes",
    "due",
    "age",
]
RESOLVED_COLUMNS = ["priority", "tags", "project", "summary", "resolved"]


def tasks_view(
    context_description: Optional[str],
    report_name: str,
    tasks: list[Task],
    id_of: Callable[[Task], Optional[int]],
    columns: list[str] = DEFAULT_COLUMNS,
    now: Optional[pendulum.DateTime] = None,
) -> None:
    now = now or now_local()
    header(context_description, report_name)

    if not tasks:
        Console().print("  no tasks", style="grey50")
        return

    tasks_table = Table(box=box.SIMPLE)
    for column in columns:
        tasks_table.add_column(column)

    for task in tasks:
        row = []
        for column in columns:
            column_value = ""
            if column == "id":
                id = id_of(task)
                column_value = str(id) if id is not None else ""
            elif column == "tags":
                column_value = format_tags(task["tags"])
            elif column == "notes":
                column_value = has_notes(task)
            elif column == "age":
                column_value = task_age(task, now)
            elif column in ("due", "resolved", "created"):
                column_value = (
                    datetime_to_display_local_date_str_optional(task[column])  # type: ignore[literal-required]
                    or ""
                )
            elif task[column] is not None:  # type: ignore[literal-required]
                column_value = escape(str(task[column]))  # type: ignore[literal-required]
            row.append(column_value)
        tasks_table.add_row(*row, style=task_color(task, now))

    console = Console()
    console.print(tasks_table)


def single_task_view(task: Task, id: Optional[int]) -> None:
    header(None, "task")

    task_table = Table(box=box.SIMPLE)
    task_table.add_column("property")
    task_table.add_column("value")

    task_table.add_row("id", str(id) if id is not None else "")
    task_table.add_row("key", task["key"])
    task_table.add_row("summary", escape(task["summary"]))
    task_table.add_row("status", str(task["status"]))
    task_table.add_row("priority", str(task["priority"]))
    task_table.add_row("tags", format_tags(task["tags"]))
    task_table.add_row("project", task["project"] or "")
    task_table.add_row("created", datetime_to_display_local_date_str(task["created"]))
    task_table.add_row(
        "resolved", datetime_to_display_local_date_str_optional(task["resolved"]) or ""
    )
    task_table.add_row(
        "due", datetime_to_display_local_date_str_optional(task["due"]) or ""
    )
    task_table.add_row("notes", escape(task["notes"]))

    console = Console()
    console.print(task_table)
