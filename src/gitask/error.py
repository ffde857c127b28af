# SPDX-License-Identifier: MIT

from typing import Optional


class GitaskError(Exception):
    """Base class for every error surfaced at the command boundary."""


class ParseError(GitaskError):
    def __init__(self, message: str, token: Optional[str] = None) -> None:
        super().__init__(message)
        self.token = token


class InvalidDate(ParseError):
    def __init__(self, expression: str) -> None:
        super().__init__(
            f"invalid date '{expression}', expected YYYY-MM-DD, MM-DD, DD, "
            "today, tomorrow, yesterday, a weekday, next-<weekday> or this-<weekday>",
            expression,
        )


class InvalidContextFilter(ParseError):
    pass


class ValidationError(GitaskError):
    pass


class EmptySummary(ValidationError):
    def __init__(self) -> None:
        super().__init__("task summary cannot be empty")


class IncompleteChecklist(ValidationError):
    def __init__(self, key: str) -> None:
        super().__init__(f"refusing to resolve task {key} with an incomplete checklist")
        self.key = key


class InvalidTransition(ValidationError):
    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(f"invalid status transition from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class ContextReadOnly(ValidationError):
    def __init__(self) -> None:
        super().__init__("context is set by GITASK_CONTEXT and cannot be changed")


class LookupFailure(GitaskError):
    pass


class UnknownTaskId(LookupFailure):
    def __init__(self, id: int) -> None:
        super().__init__(f"no open task with ID {id}")
        self.id = id


class TemplateNotFound(LookupFailure):
    def __init__(self, reference: str) -> None:
        super().__init__(f"{reference} does not refer to a template")
        self.reference = reference


class StorageError(GitaskError):
    pass


class CorruptTaskFile(StorageError):
    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"cannot read task {key}: {reason}")
        self.key = key
        self.reason = reason


class RepositoryUnavailable(StorageError):
    pass


class CommitFailed(StorageError):
    pass


class SyncError(GitaskError):
    pass


class SyncConflict(SyncError):
    pass


class NoRemoteConfigured(SyncError):
    def __init__(self) -> None:
        super().__init__(
            "no git remote configured, add one with: gitask git remote add origin <url>"
        )


class UndoError(GitaskError):
    pass


class NothingToUndo(UndoError):
    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            f"cannot undo {requested} commit(s), history has {available}"
        )
        self.requested = requested
        self.available = available
