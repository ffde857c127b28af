# SPDX-License-Identifier: MIT

from gitask import configuration
from gitask.logger import configure_logging
from gitask.repository.configuration import ConfigurationRepository
from gitask.repository.context import ContextRepository
from gitask.repository.task import TaskRepository
from gitask.service.command import Workspace


def initialize(ignore_context: bool = False) -> Workspace:
    """Load configuration and open the task repository and context."""
    configuration.CONFIG_PATH.mkdir(parents=True, exist_ok=True)

    config = ConfigurationRepository(configuration.APP_CONFIG_PATH).get_config()
    configure_logging(config["log_level"].upper())

    repo_path = configuration.resolve_repo_path(config)
    return Workspace(
        config,
        TaskRepository(repo_path),
        ContextRepository(configuration.CONTEXT_PATH, configuration.context_override()),
        ignore_context=ignore_context,
    )
