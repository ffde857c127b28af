# SPDX-License-Identifier: MIT

import logging
from pathlib import Path
from typing import Optional, Sequence

from gitask.error import (
    NoRemoteConfigured,
    NothingToUndo,
    RepositoryUnavailable,
    SyncConflict,
    SyncError,
    ValidationError,
)
from gitask.version.git import Git, GitCommandError

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"


class Version:
    """History operations on the task repository: checkpoints, undo and sync."""

    def __init__(self, repo_path: Path, git: Optional[Git] = None) -> None:
        self.repo_path = repo_path
        self.git = git or Git()

    def initialize_data_versioning(self) -> None:
        """Create the repository on first use, refuse unusable directories."""
        if self.repo_path.exists() and not self.repo_path.is_dir():
            raise RepositoryUnavailable(f"{self.repo_path} is not a directory")

        try:
            if not self.git.is_git_repo(self.repo_path):
                if self.repo_path.exists() and any(self.repo_path.iterdir()):
                    raise RepositoryUnavailable(
                        f"{self.repo_path} is not empty and is not a git repository"
                    )
                logger.info("initializing task repository at %s", self.repo_path)
                self.git.init(self.repo_path)
            self.git.ensure_identity(self.repo_path)
        except (OSError, GitCommandError) as e:
            raise RepositoryUnavailable(
                f"cannot open task repository {self.repo_path}: {e}"
            ) from e

    def create_data_checkpoint(self, message: str) -> bool:
        """Commit everything in the work tree. Returns False when nothing changed."""
        self.git.add_all(self.repo_path)
        if not self.git.has_staged_changes(self.repo_path):
            return False
        self.git.commit(self.repo_path, message)
        logger.info("committed '%s'", message)
        return True

    def head(self) -> Optional[str]:
        return self.git.head(self.repo_path)

    def commit_count(self) -> int:
        return self.git.commit_count(self.repo_path)

    def restore(self, head: Optional[str]) -> None:
        if head is None:
            self.git.clear_history(self.repo_path)
        else:
            self.git.reset_hard(self.repo_path, head)

    def undo(self, count: int) -> None:
        if count < 1:
            raise ValidationError("the number of commits to undo must be at least 1")
        available = self.commit_count()
        if available == 0 or count > available:
            raise NothingToUndo(count, available)

        if count == available:
            self.git.clear_history(self.repo_path)
        else:
            self.git.reset_hard(self.repo_path, f"HEAD~{count}")
        logger.info("undid %d commit(s)", count)

    def sync(self) -> None:
        """Pull with a merge, then push. A conflicting merge is aborted."""
        remotes = self.git.remotes(self.repo_path)
        if not remotes:
            raise NoRemoteConfigured()
        remote = DEFAULT_REMOTE if DEFAULT_REMOTE in remotes else remotes[0]

        try:
            branch = self.git.current_branch(self.repo_path)
            has_upstream = self.git.has_upstream(self.repo_path)

            pull_result = None
            if has_upstream:
                pull_result = self.git.pull(self.repo_path)
            elif self.git.remote_has_branch(self.repo_path, remote, branch):
                pull_result = self.git.pull(self.repo_path, remote, branch)

            if pull_result is not None and pull_result.returncode != 0:
                output = pull_result.stdout + pull_result.stderr
                if self.git.is_merging(self.repo_path):
                    self.git.merge_abort(self.repo_path)
                    raise SyncConflict(
                        f"pulling from {remote} conflicts with local changes, "
                        f"merge aborted: {output.strip()}"
                    )
                raise SyncError(f"pulling from {remote} failed: {output.strip()}")

            if self.commit_count() == 0:
                logger.info("nothing to push")
                return
            if has_upstream:
                self.git.push(self.repo_path)
            else:
                self.git.push(self.repo_path, remote, branch, set_upstream=True)
        except GitCommandError as e:
            raise SyncError(str(e)) from e

        logger.info("synced with %s", remote)

    def run_raw(self, arguments: Sequence[str]) -> tuple[int, str]:
        return self.git.raw(self.repo_path, arguments)
