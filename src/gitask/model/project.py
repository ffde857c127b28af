# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

import pendulum

from gitask.model.priority import Priority


class Project(TypedDict):
    name: str
    tasks: int
    tasks_resolved: int
    active: bool
    created: pendulum.DateTime
    resolved: Optional[pendulum.DateTime]
    priority: Priority
