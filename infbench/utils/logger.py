# infbench/utils/logger.py

"""Logging utilities.

Library modules log to children of the `infbench` logger
(`logging.getLogger(__name__)`); entry points call `build_logger` once.
Runs may execute on the orchestrator's worker thread, so records carry the
thread name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def build_logger(name: str = "infbench",
                 level: Union[str, int] = "INFO",
                 log_file: Optional[str] = None) -> logging.Logger:
    """Configure `name` with a console handler and an optional file handler."""
    logger = logging.getLogger(name)
    logger.setLevel(_to_level(level))

    # Avoid duplicate handlers if called multiple times
    if logger.handlers:
        return logger

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        p = Path(log_file)
        p.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(p, encoding="utf-8"))

    for h in handlers:
        h.setFormatter(fmt)
        logger.addHandler(h)

    logger.propagate = False
    return logger
