# SPDX-License-Identifier: MIT

from gitask.model.entity_key import generate_entity_key
from gitask.model.priority import DEFAULT_PRIORITY
from gitask.model.status import Status
from gitask.model.task import Task
from gitask.time import now_local


def get_task_template() -> Task:
    return {
        "key": generate_entity_key(),
        "summary": "",
        "notes": "",
        "tags": [],
        "project": None,
        "priority": DEFAULT_PRIORITY,
        "status": Status.PENDING,
        "created": now_local(),
        "resolved": None,
        "due": None,
    }
