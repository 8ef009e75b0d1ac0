"""
core/log.py

Logging helpers for FilterPhoto. Modules call get_logger(__name__) and get a
child of the single "filterphoto" logger, which owns the stream handler.
"""

import logging
from typing import Optional

ROOT_LOGGER_NAME = "filterphoto"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LOGGER: Optional[logging.Logger] = None


def _root_logger() -> logging.Logger:
    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger(ROOT_LOGGER_NAME)
        if not _LOGGER.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            _LOGGER.addHandler(handler)
        _LOGGER.setLevel(logging.INFO)
    return _LOGGER


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return the application logger, or a child of it for `name`.
    Module paths are folded under the root name: "core.controller"
    becomes "filterphoto.core.controller".
    """
    root = _root_logger()
    if not name:
        return root
    if name.startswith(ROOT_LOGGER_NAME + ".") or name == ROOT_LOGGER_NAME:
        return logging.getLogger(name)
    return root.getChild(name)
