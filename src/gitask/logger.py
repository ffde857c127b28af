# SPDX-License-Identifier: MIT

import logging

from rich.console import Console
from rich.logging import RichHandler

_FORMAT = "%(message)s"


def configure_logging(level: int | str = logging.WARNING) -> None:
    """Idempotently attach a rich handler to the package logger."""
    logger = logging.getLogger("gitask")
    logger.setLevel(level)
    if any(isinstance(handler, RichHandler) for handler in logger.handlers):
        return
    handler = RichHandler(
        console=Console(stderr=True), rich_tracebacks=True, show_path=False
    )
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
