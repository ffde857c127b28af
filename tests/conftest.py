# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Any, Callable

import pendulum
import pytest

from gitask import configuration
from gitask.model.task import Task
from gitask.repository.context import ContextRepository
from gitask.repository.task import TaskRepository
from gitask.service.command import Workspace
from gitask.template.task import get_task_template
from helpers import NOW

GIT_CONFIG = """\
[init]
\tdefaultBranch = main
[user]
\tname = Test User
\temail = test@example.com
[commit]
\tgpgsign = false
"""


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    git_config = tmp_path / "gitconfig"
    git_config.write_text(GIT_CONFIG)
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(git_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv(configuration.REPO_ENV_VAR, raising=False)
    monkeypatch.delenv(configuration.CONTEXT_ENV_VAR, raising=False)

    config_dir = tmp_path / "config"
    monkeypatch.setattr(configuration, "CONFIG_PATH", config_dir)
    monkeypatch.setattr(configuration, "APP_CONFIG_PATH", config_dir / "config.yaml")
    monkeypatch.setattr(configuration, "CONTEXT_PATH", config_dir / "context.yaml")


@pytest.fixture
def now() -> pendulum.DateTime:
    return NOW


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    return tmp_path / "repo"


@pytest.fixture
def task_repository(repo_path: Path) -> TaskRepository:
    return TaskRepository(repo_path)


@pytest.fixture
def context_repository(tmp_path: Path) -> ContextRepository:
    return ContextRepository(tmp_path / "config" / "context.yaml")


@pytest.fixture
def workspace(
    task_repository: TaskRepository,
    context_repository: ContextRepository,
    now: pendulum.DateTime,
) -> Workspace:
    return Workspace(
        configuration.default_configuration(),
        task_repository,
        context_repository,
        now=now,
    )


@pytest.fixture
def make_task() -> Callable[..., Task]:
    def factory(**fields: Any) -> Task:
        task = get_task_template()
        task["summary"] = "a task"
        task["created"] = NOW
        task.update(fields)  # type: ignore[typeddict-item]
        return task

    return factory

