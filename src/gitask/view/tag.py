# SPDX-License-Identifier: MIT

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from gitask.view.header import header


def tags_view(context_description: Optional[str], tags: list[str]) -> None:
    header(context_description, "tags")

    tags_table = Table(box=box.SIMPLE)
    tags_table.add_column("tag")

    for tag in tags:
        tags_table.add_row(tag)

    console = Console()
    console.print(tags_table)
