# SPDX-License-Identifier: MIT

from copy import deepcopy
from pathlib import Path
from typing import Optional, get_args

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from gitask import configuration
from gitask.error import ValidationError


class ConfigurationRepository:
    def __init__(self, path: Path = configuration.APP_CONFIG_PATH) -> None:
        self.path = path
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        if not self.path.exists():
            self._config = configuration.default_configuration()
            self.is_dirty = True
            self.flush()
            return

        self._config = load(self.path.read_text(), Loader=Loader)
        if self._config is None:
            self._config = configuration.default_configuration()

        # Fill in settings added after the file was written
        for setting, default in configuration.default_configuration().items():
            if setting not in self._config:
                self._config[setting] = default  # type: ignore[literal-required]

        strategy = self._config["bulk_commit_strategy"]
        if strategy not in get_args(configuration.BulkCommitStrategy):
            raise ValidationError(
                f"bulk_commit_strategy must be per_task or single, not '{strategy}'"
            )

    def __save_data(self, config: configuration.Configuration) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(dump(dict(config), Dumper=Dumper, sort_keys=False))

    def flush(self) -> None:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)
