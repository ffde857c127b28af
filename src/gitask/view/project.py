# SPDX-License-Identifier: MIT

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from gitask.model.project import Project
from gitask.time import (
    datetime_to_display_local_date_str,
    datetime_to_display_local_date_str_optional,
)
from gitask.view.header import header


def projects_view(context_description: Optional[str], projects: list[Project]) -> None:
    header(context_description, "projects")

    projects_table = Table(box=box.SIMPLE)
    projects_table.add_column("project")
    projects_table.add_column("progress")
    projects_table.add_column("active")
    projects_table.add_column("priority")
    projects_table.add_column("created")
    projects_table.add_column("resolved")

    for project in projects:
        projects_table.add_row(
            project["name"],
            f"{project['tasks_resolved']}/{project['tasks']}",
            "✓" if project["active"] else " ",
            str(project["priority"]) if project["tasks_resolved"] < project["tasks"] else "",
            datetime_to_display_local_date_str(project["created"]),
            datetime_to_display_local_date_str_optional(project["resolved"]) or "",
        )

    console = Console()
    console.print(projects_table)
