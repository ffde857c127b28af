# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from pathlib import Path
from typing import Literal, Optional, Sequence, TypedDict

from gitask.configuration import BulkCommitStrategy
from gitask.error import (
    CommitFailed,
    CorruptTaskFile,
    RepositoryUnavailable,
    UndoError,
)
from gitask.model.entity_key import EntityKey, is_valid_entity_key
from gitask.model.id_map import IdMap
from gitask.model.status import Status
from gitask.model.task import Task
from gitask.repository.id_map import allocate, get_key
from gitask.repository.task_file import (
    LEGACY_TASK_SUFFIX,
    TASK_SUFFIX,
    deserialize_legacy_task,
    deserialize_task,
    serialize_task,
)
from gitask.service.task import validate_task
from gitask.version.git import GitCommandError
from gitask.version.version import Version

logger = logging.getLogger(__name__)


class PendingChange(TypedDict):
    action: Literal["save", "remove"]
    task: Task
    message: str


class TaskRepository:
    """
    Task files in a git work tree.

    `save` and `remove` only record changes. `commit` writes them and
    commits according to the bulk strategy; a failure part way through
    returns both the files and the history to where they were before the
    commit started.
    """

    def __init__(self, repo_path: Path, version: Optional[Version] = None) -> None:
        self.repo_path = repo_path
        self.version = version or Version(repo_path)
        self._tasks: Optional[list[Task]] = None
        self._id_map: Optional[IdMap] = None
        self._legacy_paths: dict[EntityKey, Path] = {}
        self._pending: list[PendingChange] = []

    @property
    def tasks(self) -> list[Task]:
        if self._tasks is None:
            self.__load_data()
        if self._tasks is None:
            raise ValueError()
        return self._tasks

    @property
    def id_map(self) -> IdMap:
        if self._id_map is None:
            self._id_map = allocate(self.tasks)
        return self._id_map

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._pending)

    def __load_data(self) -> None:
        self.version.initialize_data_versioning()

        tasks: dict[EntityKey, Task] = {}
        self._legacy_paths = {}
        try:
            # Current layout wins over a legacy file for the same key
            for file_path in sorted(self.repo_path.glob(f"*{TASK_SUFFIX}")):
                key = file_path.stem
                if not is_valid_entity_key(key):
                    continue
                tasks[key] = deserialize_task(key, file_path.read_text())

            legacy_files = [
                (file_path, None)
                for file_path in sorted(self.repo_path.glob(f"*{LEGACY_TASK_SUFFIX}"))
            ]
            for status in Status:
                status_dir = self.repo_path / str(status)
                if status_dir.is_dir():
                    legacy_files += [
                        (file_path, str(status))
                        for file_path in sorted(status_dir.glob(f"*{LEGACY_TASK_SUFFIX}"))
                    ]

            for file_path, status_directory in legacy_files:
                key = file_path.stem
                if key in tasks or not is_valid_entity_key(key):
                    continue
                tasks[key] = deserialize_legacy_task(
                    key, file_path.read_text(), status_directory
                )
                self._legacy_paths[key] = file_path
        except UnicodeDecodeError as e:
            raise CorruptTaskFile(file_path.stem, "not valid UTF-8") from e
        except OSError as e:
            raise RepositoryUnavailable(
                f"cannot read task repository {self.repo_path}: {e}"
            ) from e

        self._tasks = list(tasks.values())
        self._id_map = None
        logger.debug("loaded %d task(s) from %s", len(self._tasks), self.repo_path)

    def load_all(self) -> list[Task]:
        return deepcopy(self.tasks)

    def get_task(self, key: EntityKey) -> Task:
        return deepcopy([task for task in self.tasks if task["key"] == key][0])

    def get_task_by_id(self, id: int) -> Task:
        return self.get_task(get_key(self.id_map, id))

    def save(self, task: Task, message: str) -> None:
        validate_task(task)
        self._pending.append(
            {"action": "save", "task": deepcopy(task), "message": message}
        )

    def remove(self, task: Task, message: str) -> None:
        self._pending.append(
            {"action": "remove", "task": deepcopy(task), "message": message}
        )

    def discard(self) -> None:
        self._pending = []

    def commit(self, description: str, strategy: BulkCommitStrategy) -> int:
        """
        Write and commit the recorded changes. Returns the number of
        commits made.
        """
        if not self._pending:
            return 0

        pending = self._pending
        self._pending = []
        if self._tasks is None:
            self.__load_data()

        head = self.version.head()
        snapshots = self.__snapshot_files(pending)
        commits = 0
        try:
            if strategy == "single":
                for change in pending:
                    self.__write_change(change)
                if self.version.create_data_checkpoint(description):
                    commits += 1
            else:
                for change in pending:
                    self.__write_change(change)
                    if self.version.create_data_checkpoint(change["message"]):
                        commits += 1
        except (OSError, GitCommandError) as e:
            logger.warning("commit failed, rolling back: %s", e)
            self.__rollback(head, snapshots)
            raise CommitFailed(f"could not commit '{description}': {e}") from e

        for change in pending:
            self.__apply_change(change)
        self._id_map = None
        return commits

    def undo(self, count: int) -> None:
        self.version.initialize_data_versioning()
        try:
            self.version.undo(count)
        except GitCommandError as e:
            raise UndoError(f"could not undo {count} commit(s): {e}") from e
        self._tasks = None
        self._id_map = None

    def sync(self) -> None:
        self.version.initialize_data_versioning()
        self.version.sync()
        self._tasks = None
        self._id_map = None

    def run_raw(self, arguments: Sequence[str]) -> tuple[int, str]:
        self.version.initialize_data_versioning()
        result = self.version.run_raw(arguments)
        self._tasks = None
        self._id_map = None
        return result

    def commit_count(self) -> int:
        self.version.initialize_data_versioning()
        return self.version.commit_count()

    def task_path(self, key: EntityKey) -> Path:
        return self.repo_path / f"{key}{TASK_SUFFIX}"

    def __write_change(self, change: PendingChange) -> None:
        key = change["task"]["key"]
        legacy_path = self._legacy_paths.get(key)
        if change["action"] == "save":
            self.task_path(key).write_text(serialize_task(change["task"]))
        elif self.task_path(key).exists():
            self.task_path(key).unlink()
        if legacy_path is not None and legacy_path.exists():
            legacy_path.unlink()

    def __apply_change(self, change: PendingChange) -> None:
        key = change["task"]["key"]
        self._legacy_paths.pop(key, None)
        remaining = [task for task in self.tasks if task["key"] != key]
        if change["action"] == "save":
            remaining.append(deepcopy(change["task"]))
        self._tasks = remaining

    def __snapshot_files(self, pending: list[PendingChange]) -> dict[Path, Optional[bytes]]:
        snapshots: dict[Path, Optional[bytes]] = {}
        for change in pending:
            key = change["task"]["key"]
            paths = [self.task_path(key)]
            if key in self._legacy_paths:
                paths.append(self._legacy_paths[key])
            for path in paths:
                if path not in snapshots:
                    snapshots[path] = path.read_bytes() if path.exists() else None
        return snapshots

    def __rollback(
        self, head: Optional[str], snapshots: dict[Path, Optional[bytes]]
    ) -> None:
        try:
            self.version.restore(head)
        except GitCommandError as e:
            logger.error("could not reset history to %s: %s", head or "empty", e)
        for path, content in snapshots.items():
            if content is None:
                if path.exists():
                    path.unlink()
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(content)
        self._tasks = None
        self._id_map = None
