# SPDX-License-Identifier: MIT

import os
from pathlib import Path
from typing import Literal, Optional, TypedDict

import platformdirs

APP_NAME = "gitask"

REPO_ENV_VAR = "GITASK_REPO"
CONTEXT_ENV_VAR = "GITASK_CONTEXT"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"
CONTEXT_PATH = CONFIG_PATH / "context.yaml"

DEFAULT_REPO_PATH = platformdirs.user_data_path(APP_NAME) / "repo"

BulkCommitStrategy = Literal["per_task", "single"]


class Configuration(TypedDict):
    repo_path: Optional[str]
    bulk_commit_strategy: BulkCommitStrategy
    sync_after_modify: bool
    log_level: str


def default_configuration() -> Configuration:
    return {
        "repo_path": None,
        "bulk_commit_strategy": "per_task",
        "sync_after_modify": False,
        "log_level": "WARNING",
    }


def resolve_repo_path(config: Configuration) -> Path:
    """
    Resolve the task repository location.

    GITASK_REPO wins over the repo_path setting, which wins over the
    platform data directory.
    """
    env_repo = os.environ.get(REPO_ENV_VAR)
    if env_repo:
        return Path(env_repo).expanduser()
    if config["repo_path"] is not None:
        return Path(config["repo_path"]).expanduser()
    return DEFAULT_REPO_PATH


def context_override() -> Optional[str]:
    return os.environ.get(CONTEXT_ENV_VAR)
