# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Optional

from gitask.model.filter import Filter


def merge(context: Optional[Filter], command: Filter) -> Filter:
    """
    Combine a stored context with a command's own filter.

    Tag and anti-project sets are unioned so a command cannot step outside
    its context without the bypass token. Single-valued fields set on both
    sides take the command's value.
    """
    merged = deepcopy(command)
    if context is None or command["ignore_context"]:
        return merged

    for tag in context["tags_in"]:
        if tag not in merged["tags_in"]:
            merged["tags_in"].append(tag)
    for tag in context["tags_out"]:
        if tag not in merged["tags_out"]:
            merged["tags_out"].append(tag)
    for project in context["project_out"]:
        if project not in merged["project_out"]:
            merged["project_out"].append(project)

    if merged["project_in"] is None:
        merged["project_in"] = context["project_in"]
    if merged["priority"] is None:
        merged["priority"] = context["priority"]
    if merged["due_constraint"] is None:
        merged["due_constraint"] = deepcopy(context["due_constraint"])

    return merged
