# SPDX-License-Identifier: MIT

import re
from typing import Optional

import click
import typer.core


class AliasedTyperGroup(typer.core.TyperGroup):
    """Custom TyperGroup that supports comma-separated command aliases"""

    _CMD_SPLIT_P = re.compile(r" ?, ?")

    # Help lists commands in this order, then any others
    desired_order = [
        "next, n",
        "add, a",
        "log",
        "template",
        "start",
        "stop",
        "done",
        "modify, m",
        "remove, rm",
        "context",
        "sync",
        "undo",
        "show-open",
        "show-active",
        "show-paused",
        "show-resolved",
        "show-templates",
        "show-unorganised",
        "show-projects",
        "show-tags",
        "git",
    ]

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        """Override to resolve aliases to the full command name"""
        cmd_name = self._group_cmd_name(cmd_name)
        return super().get_command(ctx, cmd_name)

    def _group_cmd_name(self, default_name: str) -> str:
        for cmd in self.commands.values():
            name = cmd.name
            if name and default_name in self._CMD_SPLIT_P.split(name):
                return name
        return default_name

    def list_commands(self, ctx: click.Context) -> list[str]:
        result = [name for name in self.desired_order if name in self.commands]
        result += [name for name in self.commands.keys() if name not in result]
        return result
