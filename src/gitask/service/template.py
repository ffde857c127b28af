# SPDX-License-Identifier: MIT

from typing import Optional

import pendulum

from gitask.error import TemplateNotFound
from gitask.model.filter import Filter
from gitask.model.status import Status
from gitask.model.task import Task
from gitask.service.task import apply_filter
from gitask.template.task import get_task_template
from gitask.time import now_local


def instantiate(
    template_task: Optional[Task],
    overrides: Filter,
    now: Optional[pendulum.DateTime] = None,
    reference: str = "template",
) -> Task:
    """
    Materialise a pending task from a template.

    Summary, tags, project, priority, due and notes are copied, then the
    override filter is applied on top. Tags in the overrides add to and
    remove from the copied set rather than replacing it.
    """
    if template_task is None or template_task["status"] != Status.TEMPLATE:
        raise TemplateNotFound(reference)

    task = get_task_template()
    task["summary"] = template_task["summary"]
    task["tags"] = list(template_task["tags"])
    task["project"] = template_task["project"]
    task["priority"] = template_task["priority"]
    task["due"] = template_task["due"]
    task["notes"] = template_task["notes"]
    task["status"] = Status.PENDING
    task["created"] = now or now_local()
    task["resolved"] = None

    return apply_filter(task, overrides, replace_summary=True)
