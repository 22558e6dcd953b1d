"""File logging for tasksync.

Everything goes to a size-rotated log under the platform log directory so
that console output stays reserved for command results.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

ROOT_NAME = "tasksync"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
ROTATE_AT = 5 * 1024 * 1024
KEEP_FILES = 3

_logger: logging.Logger | None = None


def _file_handler() -> logging.Handler:
    directory = Path(user_log_dir(ROOT_NAME))
    directory.mkdir(parents=True, exist_ok=True)
    # the file is opened on the first record
    handler = logging.handlers.RotatingFileHandler(
        directory / f"{ROOT_NAME}.log",
        maxBytes=ROTATE_AT,
        backupCount=KEEP_FILES,
        encoding="utf-8",
        delay=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    return handler


def file_handlers(logger: logging.Logger) -> list[logging.handlers.RotatingFileHandler]:
    return [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the tasksync logger, or its child ``tasksync.<name>``.

    The file handler is attached once, on the first call. Handlers added
    by others (e.g. log capture) do not count.
    """
    global _logger
    if _logger is None:
        root = logging.getLogger(ROOT_NAME)
        if not file_handlers(root):
            root.addHandler(_file_handler())
        root.setLevel(logging.DEBUG)
        root.propagate = False
        _logger = root

    return _logger.getChild(name) if name else _logger
