# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import Optional, TypedDict

import pendulum

from gitask.model.priority import Priority
from gitask.model.status import Status


class DueOperator(StrEnum):
    ON = "on"
    BEFORE = "before"
    AFTER = "after"
    TODAY = "today"
    OVERDUE = "overdue"


class DueConstraint(TypedDict):
    operator: DueOperator
    # None for the canned operators, which are judged against the clock
    date: Optional[pendulum.DateTime]


class Filter(TypedDict):
    ids: list[int]
    tags_in: list[str]
    tags_out: list[str]
    project_in: Optional[str]
    project_out: list[str]
    priority: Optional[Priority]
    due_constraint: Optional[DueConstraint]
    text_terms: list[str]
    status: Optional[Status]
    template: Optional[int]
    note: Optional[str]
    ignore_context: bool


# Fields a persisted context may carry
CONTEXT_FIELDS = (
    "tags_in",
    "tags_out",
    "project_in",
    "project_out",
    "priority",
    "due_constraint",
)
