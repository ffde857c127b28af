# SPDX-License-Identifier: MIT

import re
from copy import deepcopy
from typing import Any, Optional, cast

from yaml import YAMLError, dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from gitask import time
from gitask.error import CorruptTaskFile
from gitask.model.entity_key import EntityKey, is_valid_entity_key
from gitask.model.priority import DEFAULT_PRIORITY, Priority, is_valid_priority
from gitask.model.status import Status
from gitask.model.task import Task

TASK_SUFFIX = ".md"
LEGACY_TASK_SUFFIX = ".yml"

HEADER_FIELDS = (
    "summary",
    "tags",
    "project",
    "priority",
    "status",
    "created",
    "resolved",
    "due",
)
REQUIRED_HEADER_FIELDS = ("summary", "status", "created")

LEGACY_HEADER_FIELDS = (
    "summary",
    "notes",
    "tags",
    "project",
    "priority",
    "status",
    "created",
    "resolved",
    "due",
    # read and dropped
    "delegatedto",
    "subtasks",
    "dependencies",
)

_FRONTMATTER = re.compile(
    r"\A---[ \t]*\n(?P<header>.*?)^---[ \t]*$\n?(?P<body>.*)\Z",
    re.MULTILINE | re.DOTALL,
)


def serialize_task(task: Task) -> str:
    header = _convert_task_for_serialization(deepcopy(task))
    text = "---\n" + dump(header, Dumper=Dumper, sort_keys=False) + "---\n"
    if task["notes"]:
        text += task["notes"].rstrip("\n") + "\n"
    return text


def deserialize_task(key: EntityKey, text: str) -> Task:
    """Read a `<key>.md` file: a YAML header between `---` lines, then notes."""
    match = _FRONTMATTER.match(text)
    if match is None:
        raise CorruptTaskFile(key, "missing frontmatter header")

    header = _load_header(key, match.group("header"))
    unknown = set(header.keys()) - set(HEADER_FIELDS)
    if unknown:
        raise CorruptTaskFile(key, f"unknown field(s) {', '.join(sorted(unknown))}")
    for field in REQUIRED_HEADER_FIELDS:
        if header.get(field) is None:
            raise CorruptTaskFile(key, f"missing field '{field}'")

    header["notes"] = match.group("body").rstrip("\n")
    return _convert_task_for_deserialization(key, header, header["status"])


def deserialize_legacy_task(
    key: EntityKey, text: str, status_directory: Optional[str] = None
) -> Task:
    """
    Read a header-only `<key>.yml` file. Files kept under a status
    directory take their status from it.
    """
    header = _load_header(key, text)
    unknown = set(header.keys()) - set(LEGACY_HEADER_FIELDS)
    if unknown:
        raise CorruptTaskFile(key, f"unknown field(s) {', '.join(sorted(unknown))}")

    status = status_directory or header.get("status")
    if status is None:
        raise CorruptTaskFile(key, "missing field 'status'")
    if header.get("summary") is None:
        raise CorruptTaskFile(key, "missing field 'summary'")
    for field in ("created", "resolved", "due"):
        if str(header.get(field)).startswith(time.ZERO_DATE_PREFIX):
            header[field] = None
    if header.get("created") is None:
        raise CorruptTaskFile(key, "missing field 'created'")

    for field in ("delegatedto", "subtasks", "dependencies"):
        header.pop(field, None)
    header["notes"] = str(header.get("notes") or "").rstrip("\n")
    if not header.get("project"):
        header["project"] = None
    if not header.get("priority"):
        header["priority"] = DEFAULT_PRIORITY

    return _convert_task_for_deserialization(key, header, status)


def _load_header(key: EntityKey, text: str) -> dict[str, Any]:
    if not is_valid_entity_key(key):
        raise CorruptTaskFile(key, "file name is not a task key")
    try:
        header = load(text, Loader=Loader)
    except YAMLError as e:
        raise CorruptTaskFile(key, f"invalid YAML: {e}") from e
    if header is None:
        return {}
    if not isinstance(header, dict):
        raise CorruptTaskFile(key, "header is not a mapping")
    return cast(dict[str, Any], header)


def _convert_task_for_serialization(task: Task) -> dict[str, Any]:
    return {
        "summary": task["summary"],
        "tags": sorted(task["tags"]),
        "project": task["project"],
        "priority": str(task["priority"]),
        "status": str(task["status"]),
        "created": time.datetime_to_iso_str(task["created"]),
        "resolved": time.datetime_to_iso_str_optional(task["resolved"]),
        "due": time.datetime_to_iso_str_optional(task["due"]),
    }


def _convert_task_for_deserialization(
    key: EntityKey, header: dict[str, Any], status: object
) -> Task:
    try:
        task_status = Status(str(status))
    except ValueError as e:
        raise CorruptTaskFile(key, f"unknown status '{status}'") from e

    priority = header.get("priority") or DEFAULT_PRIORITY
    if not is_valid_priority(str(priority)):
        raise CorruptTaskFile(key, f"unknown priority '{priority}'")

    tags = header.get("tags") or []
    if not isinstance(tags, list):
        raise CorruptTaskFile(key, "tags must be a list")

    try:
        created = time.coerce_datetime(header["created"])
        resolved = time.coerce_datetime_optional(header.get("resolved"))
        due = time.coerce_datetime_optional(header.get("due"))
    except ValueError as e:
        raise CorruptTaskFile(key, str(e)) from e

    if (task_status == Status.RESOLVED) != (resolved is not None):
        raise CorruptTaskFile(key, "resolved time does not match status")

    project = header.get("project")
    return {
        "key": key,
        "summary": str(header["summary"]),
        "notes": header["notes"],
        "tags": sorted({str(tag) for tag in tags}),
        "project": str(project) if project else None,
        "priority": Priority(str(priority)),
        "status": task_status,
        "created": created,
        "resolved": resolved,
        "due": due,
    }
