# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

import pendulum

from gitask.model.entity_key import EntityKey
from gitask.model.priority import Priority
from gitask.model.status import Status


class Task(TypedDict):
    """
    A task as stored in its file.

    The short integer ID shown to users is not part of the record; it is
    derived from the loaded task set by the ID allocator and must be
    re-resolved to the key on every invocation.
    """

    key: EntityKey
    summary: str
    notes: str
    tags: list[str]
    project: Optional[str]
    priority: Priority
    status: Status
    created: pendulum.DateTime
    resolved: Optional[pendulum.DateTime]
    due: Optional[pendulum.DateTime]
