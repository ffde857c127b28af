# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

from yaml import YAMLError, dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from gitask import time
from gitask.error import ContextReadOnly, InvalidContextFilter
from gitask.model.filter import CONTEXT_FIELDS, DueOperator, Filter
from gitask.model.priority import Priority
from gitask.query.parse import parse
from gitask.template.filter import get_filter_template

logger = logging.getLogger(__name__)


class ContextRepository:
    """
    The default filter applied to every command.

    It is read from the context file, or from the GITASK_CONTEXT tokens
    when that override is present. An overridden context cannot be
    changed from the command line.
    """

    def __init__(self, path: Path, override: Optional[str] = None) -> None:
        self.path = path
        self.override = override
        self._context: Optional[Filter] = None
        self._loaded = False

    @property
    def read_only(self) -> bool:
        return self.override is not None

    @property
    def context(self) -> Optional[Filter]:
        if not self._loaded:
            self.__load_data()
        return deepcopy(self._context)

    def __load_data(self) -> None:
        self._loaded = True
        if self.override is not None:
            context = parse(self.override.split())
            validate_context(context)
            self._context = None if is_blank_context(context) else context
            return

        if not self.path.exists():
            self._context = None
            return

        try:
            raw_context = load(self.path.read_text(), Loader=Loader)
        except YAMLError as e:
            raise InvalidContextFilter(f"cannot read {self.path}: {e}") from e
        if not raw_context:
            self._context = None
            return
        self._context = self.__convert_context_for_deserialization(raw_context)

    def __save_data(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self._context is None:
            if self.path.exists():
                self.path.unlink()
            return
        self.path.write_text(
            dump(
                self.__convert_context_for_serialization(self._context),
                Dumper=Dumper,
                sort_keys=False,
            )
        )

    def set_context(self, filter: Filter) -> None:
        if self.read_only:
            raise ContextReadOnly()
        validate_context(filter)

        context = get_filter_template()
        for field in CONTEXT_FIELDS:
            context[field] = deepcopy(filter[field])  # type: ignore[literal-required]
        self._context = None if is_blank_context(context) else context
        self._loaded = True
        self.__save_data()
        logger.info("context set to '%s'", self.path)

    def clear(self) -> None:
        if self.read_only:
            raise ContextReadOnly()
        self._context = None
        self._loaded = True
        self.__save_data()
        logger.info("context cleared")

    def __convert_context_for_serialization(self, context: Filter) -> dict[str, Any]:
        serializable_context: dict[str, Any] = {}
        for field in CONTEXT_FIELDS:
            value = context[field]  # type: ignore[literal-required]
            if value is None or value == []:
                continue
            serializable_context[field] = value
        if "priority" in serializable_context:
            serializable_context["priority"] = str(serializable_context["priority"])
        due_constraint = context["due_constraint"]
        if due_constraint is not None:
            serializable_context["due_constraint"] = {
                "operator": str(due_constraint["operator"]),
                "date": time.datetime_to_iso_str_optional(due_constraint["date"]),
            }
        return serializable_context

    def __convert_context_for_deserialization(self, raw: dict[str, Any]) -> Filter:
        unknown = set(raw.keys()) - set(CONTEXT_FIELDS)
        if unknown:
            raise InvalidContextFilter(
                f"context file holds unsupported field(s) {', '.join(sorted(unknown))}"
            )
        context = get_filter_template()
        context["tags_in"] = [str(tag) for tag in raw.get("tags_in") or []]
        context["tags_out"] = [str(tag) for tag in raw.get("tags_out") or []]
        context["project_in"] = raw.get("project_in")
        context["project_out"] = [str(p) for p in raw.get("project_out") or []]
        if raw.get("priority") is not None:
            context["priority"] = Priority(str(raw["priority"]))
        raw_due = raw.get("due_constraint")
        if raw_due is not None:
            context["due_constraint"] = {
                "operator": DueOperator(raw_due["operator"]),
                "date": time.coerce_datetime_optional(raw_due.get("date")),
            }
        return context


def validate_context(filter: Filter) -> None:
    """Reject the filter parts that only make sense for a single command."""
    if filter["ids"]:
        raise InvalidContextFilter("a context cannot contain task IDs")
    if filter["text_terms"]:
        raise InvalidContextFilter(
            "a context cannot contain text: " + " ".join(filter["text_terms"])
        )
    if filter["status"] is not None:
        raise InvalidContextFilter("a context cannot select a status")
    if filter["template"] is not None:
        raise InvalidContextFilter("a context cannot reference a template")
    if filter["note"] is not None:
        raise InvalidContextFilter("a context cannot carry a note")


def is_blank_context(filter: Filter) -> bool:
    return all(
        filter[field] in (None, [])  # type: ignore[literal-required]
        for field in CONTEXT_FIELDS
    )
