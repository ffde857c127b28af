# SPDX-License-Identifier: MIT

from contextvars import ContextVar

_ignore_context: ContextVar[bool] = ContextVar("ignore_context", default=False)


def set_ignore_context(value: bool) -> None:
    _ignore_context.set(value)


def get_ignore_context() -> bool:
    return _ignore_context.get()
