# SPDX-License-Identifier: MIT

from enum import StrEnum


class Priority(StrEnum):
    """Ordered so that sorting by value puts the most urgent first."""

    CRITICAL = "P0"
    HIGH = "P1"
    NORMAL = "P2"
    LOW = "P3"


DEFAULT_PRIORITY = Priority.NORMAL


def is_valid_priority(value: str) -> bool:
    return value in {priority.value for priority in Priority}
