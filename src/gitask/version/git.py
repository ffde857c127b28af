# SPDX-License-Identifier: MIT

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_USER_NAME = "gitask"
DEFAULT_USER_EMAIL = "gitask@localhost"


class GitCommandError(Exception):
    def __init__(self, arguments: Sequence[str], returncode: int, output: str) -> None:
        super().__init__(
            f"git {' '.join(arguments)} exited with {returncode}: {output.strip()}"
        )
        self.arguments = list(arguments)
        self.returncode = returncode
        self.output = output


class Git:
    """Thin wrapper running `git -C <folder> ...` for one repository at a time."""

    def is_git_repo(self, folder: Path) -> bool:
        if not folder.is_dir():
            return False
        result = self.__execute_git_command(
            folder, ["rev-parse", "--show-toplevel"], check=False
        )
        if result.returncode != 0:
            return False
        return Path(result.stdout.strip()).resolve() == folder.resolve()

    def init(self, folder: Path) -> None:
        folder.mkdir(parents=True, exist_ok=True)
        self.__execute_git_command(folder, ["init", "--quiet"])

    def ensure_identity(self, folder: Path) -> None:
        """Give the repository a local identity when none is configured."""
        for setting, default in (
            ("user.name", DEFAULT_USER_NAME),
            ("user.email", DEFAULT_USER_EMAIL),
        ):
            result = self.__execute_git_command(
                folder, ["config", setting], check=False
            )
            if result.returncode != 0 or not result.stdout.strip():
                self.__execute_git_command(folder, ["config", setting, default])

    def add_all(self, folder: Path) -> None:
        self.__execute_git_command(folder, ["add", "-A"])

    def has_staged_changes(self, folder: Path) -> bool:
        result = self.__execute_git_command(
            folder, ["diff", "--cached", "--quiet"], check=False
        )
        return result.returncode != 0

    def commit(self, folder: Path, message: str) -> None:
        self.__execute_git_command(
            folder, ["commit", "--quiet", "--no-gpg-sign", "-m", message]
        )

    def head(self, folder: Path) -> Optional[str]:
        result = self.__execute_git_command(
            folder, ["rev-parse", "--verify", "--quiet", "HEAD"], check=False
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def commit_count(self, folder: Path) -> int:
        """Commits reachable from HEAD through first parents, as `HEAD~n` walks."""
        if self.head(folder) is None:
            return 0
        result = self.__execute_git_command(
            folder, ["rev-list", "--first-parent", "--count", "HEAD"]
        )
        return int(result.stdout.strip())

    def reset_hard(self, folder: Path, revision: str) -> None:
        self.__execute_git_command(folder, ["reset", "--hard", "--quiet", revision])

    def clear_history(self, folder: Path) -> None:
        """Return the repository to an unborn branch with no tracked files."""
        tracked = self.__execute_git_command(folder, ["ls-files", "-z"]).stdout
        self.__execute_git_command(folder, ["update-ref", "-d", "HEAD"])
        self.__execute_git_command(folder, ["read-tree", "--empty"])
        for name in tracked.split("\0"):
            if not name:
                continue
            file_path = folder / name
            if file_path.exists():
                file_path.unlink()

    def remotes(self, folder: Path) -> list[str]:
        result = self.__execute_git_command(folder, ["remote"])
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def current_branch(self, folder: Path) -> str:
        result = self.__execute_git_command(folder, ["symbolic-ref", "--short", "HEAD"])
        return result.stdout.strip()

    def has_upstream(self, folder: Path) -> bool:
        result = self.__execute_git_command(
            folder,
            ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"],
            check=False,
        )
        return result.returncode == 0

    def remote_has_branch(self, folder: Path, remote: str, branch: str) -> bool:
        result = self.__execute_git_command(
            folder, ["ls-remote", "--exit-code", "--heads", remote, branch], check=False
        )
        return result.returncode == 0

    def pull(
        self, folder: Path, remote: Optional[str] = None, branch: Optional[str] = None
    ) -> subprocess.CompletedProcess[str]:
        arguments = ["pull", "--no-rebase", "--no-edit", "--quiet"]
        if remote is not None and branch is not None:
            arguments += [remote, branch]
        return self.__execute_git_command(folder, arguments, check=False)

    def is_merging(self, folder: Path) -> bool:
        result = self.__execute_git_command(
            folder, ["rev-parse", "--verify", "--quiet", "MERGE_HEAD"], check=False
        )
        return result.returncode == 0

    def merge_abort(self, folder: Path) -> None:
        self.__execute_git_command(folder, ["merge", "--abort"])

    def push(
        self,
        folder: Path,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        set_upstream: bool = False,
    ) -> None:
        arguments = ["push", "--quiet"]
        if set_upstream:
            arguments.append("-u")
        if remote is not None and branch is not None:
            arguments += [remote, branch]
        self.__execute_git_command(folder, arguments)

    def raw(self, folder: Path, arguments: Sequence[str]) -> tuple[int, str]:
        result = self.__execute_git_command(folder, list(arguments), check=False)
        return result.returncode, result.stdout + result.stderr

    def __fail_if_git_not_available(self) -> None:
        git_available = shutil.which("git")
        if git_available is None:
            raise GitCommandError(["--version"], 127, "git is not available on the system")

    def __execute_git_command(
        self, folder: Path, arguments: list[str], check: bool = True
    ) -> subprocess.CompletedProcess[str]:
        self.__fail_if_git_not_available()
        git_command = ["git", "-C", str(folder.resolve()), *arguments]
        logger.debug("running %s", " ".join(git_command))

        result = subprocess.run(git_command, text=True, capture_output=True)
        if check and result.returncode != 0:
            raise GitCommandError(arguments, result.returncode, result.stdout + result.stderr)
        return result
