# SPDX-License-Identifier: MIT

from enum import StrEnum


class Status(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    PAUSED = "paused"
    RESOLVED = "resolved"
    TEMPLATE = "template"
    DELEGATED = "delegated"
    DEFERRED = "deferred"
    RECURRING = "recurring"


# Hidden from next/show-open unless a view asks for them explicitly
HIDDEN_STATUSES = frozenset({Status.RESOLVED, Status.TEMPLATE, Status.RECURRING})

# Set directly by modify, never through start/stop/done
MARKER_STATUSES = frozenset({Status.DELEGATED, Status.DEFERRED, Status.RECURRING})

VALID_STATUS_TRANSITIONS = frozenset(
    {
        (Status.PENDING, Status.ACTIVE),
        (Status.PAUSED, Status.ACTIVE),
        (Status.ACTIVE, Status.PAUSED),
        (Status.PENDING, Status.TEMPLATE),
    }
)


def is_valid_status_transition(from_status: Status, to_status: Status) -> bool:
    if to_status == Status.RESOLVED:
        return from_status != Status.RESOLVED
    return (from_status, to_status) in VALID_STATUS_TRANSITIONS
