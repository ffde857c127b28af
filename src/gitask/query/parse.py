# SPDX-License-Identifier: MIT

import re
from typing import Optional, Sequence

import pendulum

from gitask.error import ParseError
from gitask.model.filter import DueConstraint, DueOperator, Filter
from gitask.model.priority import Priority, is_valid_priority
from gitask.model.status import Status
from gitask.query.date import resolve
from gitask.template.filter import get_filter_template
from gitask.time import datetime_to_date_str, now_local

IGNORE_CONTEXT_KEYWORD = "--"
NOTE_MODE_KEYWORD = "/"

_ID_PATTERN = re.compile(r"^[0-9]+$")

_DUE_OPERATORS: dict[str, DueOperator] = {
    "on": DueOperator.ON,
    "in": DueOperator.ON,
    "before": DueOperator.BEFORE,
    "after": DueOperator.AFTER,
}


def parse(tokens: Sequence[str], now: Optional[pendulum.DateTime] = None) -> Filter:
    """
    Classify command tokens into a Filter.

    IDs are only recognised before the first non-ID token. `--` anywhere
    requests that the stored context be ignored. Everything after `/` is
    joined into a note rather than classified.
    """
    now = now or now_local()
    filter = get_filter_template()
    ids_exhausted = False
    note_mode = False
    note_words: list[str] = []

    for token in tokens:
        if token == IGNORE_CONTEXT_KEYWORD:
            filter["ignore_context"] = True
            continue

        if note_mode:
            note_words.append(token)
            continue

        if not ids_exhausted and _ID_PATTERN.match(token):
            filter["ids"].append(int(token))
            continue

        ids_exhausted = True

        if token == NOTE_MODE_KEYWORD:
            note_mode = True
        elif token.startswith("project:") or token.startswith("+project:"):
            project = token.split(":", 1)[1]
            if not project:
                raise ParseError("project name cannot be empty", token)
            if filter["project_in"] is None:
                filter["project_in"] = project
        elif token.startswith("-project:"):
            project = token.split(":", 1)[1]
            if not project:
                raise ParseError("project name cannot be empty", token)
            if project not in filter["project_out"]:
                filter["project_out"].append(project)
        elif token.startswith("due:") or token.startswith("due."):
            if filter["due_constraint"] is not None:
                raise ParseError("only one due date may be given", token)
            filter["due_constraint"] = parse_due_token(token, now)
        elif token.startswith("template:"):
            reference = token.split(":", 1)[1]
            if not _ID_PATTERN.match(reference):
                raise ParseError("template reference must be a task ID", token)
            filter["template"] = int(reference)
        elif token.startswith("status:"):
            value = token.split(":", 1)[1]
            if value not in {status.value for status in Status}:
                raise ParseError(f"unknown status '{value}'", token)
            filter["status"] = Status(value)
        elif token.startswith("+") and len(token) > 1:
            if token[1:] not in filter["tags_in"]:
                filter["tags_in"].append(token[1:])
        elif token.startswith("-") and len(token) > 1:
            if token[1:] not in filter["tags_out"]:
                filter["tags_out"].append(token[1:])
        elif filter["priority"] is None and is_valid_priority(token):
            filter["priority"] = Priority(token)
        else:
            filter["text_terms"].append(token)

    if note_mode:
        filter["note"] = " ".join(note_words)

    return filter


def parse_due_token(token: str, now: pendulum.DateTime) -> DueConstraint:
    selector, separator, expression = token.partition(":")
    if not separator or not expression:
        raise ParseError(
            "expected due:<date>, due.before:<date>, due.after:<date> or due.on:<date>",
            token,
        )

    if selector == "due":
        if expression == "overdue":
            return {"operator": DueOperator.OVERDUE, "date": None}
        if expression == "today":
            return {"operator": DueOperator.TODAY, "date": None}
        return {"operator": DueOperator.ON, "date": resolve(expression, now)}

    operator_name = selector[len("due.") :]
    if operator_name not in _DUE_OPERATORS:
        raise ParseError(
            f"unknown due filter '{operator_name}', valid filters are: before, after, on, in",
            token,
        )
    return {
        "operator": _DUE_OPERATORS[operator_name],
        "date": resolve(expression, now),
    }


def has_operators(filter: Filter) -> bool:
    """True when the filter carries anything besides IDs and free text."""
    return bool(
        filter["tags_in"]
        or filter["tags_out"]
        or filter["project_in"] is not None
        or filter["project_out"]
        or filter["priority"] is not None
        or filter["due_constraint"] is not None
        or filter["status"] is not None
        or filter["template"] is not None
    )


def is_empty(filter: Filter) -> bool:
    return not (
        has_operators(filter)
        or filter["ids"]
        or filter["text_terms"]
        or filter["note"] is not None
    )


def format_filter(filter: Filter) -> str:
    """Rebuild the token form of a filter, for display."""
    tokens: list[str] = [str(id) for id in filter["ids"]]
    tokens += [f"+{tag}" for tag in filter["tags_in"]]
    tokens += [f"-{tag}" for tag in filter["tags_out"]]
    if filter["project_in"] is not None:
        tokens.append(f"project:{filter['project_in']}")
    tokens += [f"-project:{project}" for project in filter["project_out"]]

    due_constraint = filter["due_constraint"]
    if due_constraint is not None:
        match due_constraint["operator"]:
            case DueOperator.OVERDUE | DueOperator.TODAY:
                tokens.append(f"due:{due_constraint['operator']}")
            case operator:
                date = datetime_to_date_str(
                    due_constraint["date"]  # type: ignore[arg-type]
                )
                if operator == DueOperator.ON:
                    tokens.append(f"due:{date}")
                else:
                    tokens.append(f"due.{operator}:{date}")

    if filter["priority"] is not None:
        tokens.append(str(filter["priority"]))
    if filter["status"] is not None:
        tokens.append(f"status:{filter['status']}")
    if filter["template"] is not None:
        tokens.append(f"template:{filter['template']}")
    if filter["text_terms"]:
        tokens.append('"' + " ".join(filter["text_terms"]) + '"')
    return " ".join(tokens)
