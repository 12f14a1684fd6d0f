"""
Logging for the back office scripts and library code.

Library modules import `logger`; scripts that want their own log file call
setup_logging("<script name>").
"""

import logging
import sys

from config.settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_handler(name: str) -> logging.Handler:
    log_dir = settings.resolve_path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / f"{name}.log", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logging(name: str = "backoffice") -> logging.Logger:
    """
    Configure a named logger once; repeated calls return it unchanged.

    Console output follows DEBUG, the file under LOG_DIR always gets
    everything down to DEBUG.
    """
    log = logging.getLogger(name)
    log.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    if log.handlers:
        return log

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    handlers = [console]
    if settings.LOG_TO_FILE:
        handlers.append(_file_handler(name))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        log.addHandler(handler)

    return log


logger = setup_logging()
