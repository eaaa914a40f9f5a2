"""Logging setup shared by the pipeline, the processors and the CLI.

Every component logs through a logger named ``image-variants.<component>``
(``processor``, ``storage``, ``pipeline``...). Each one writes to stdout on
its own handler and does not propagate, so messages from worker threads are
printed once, tagged with the thread that rendered the variant.
"""

import os
import sys
import logging
from typing import Dict, Optional, Tuple

ROOT_LOGGER_NAME = "image-variants"

# format_type -> (format, datefmt)
LOG_FORMATS: Dict[str, Tuple[str, Optional[str]]] = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(threadName)s | %(funcName)s() | %(message)s",
        "%Y-%m-%d %H:%M:%S",
    ),
    "simple": ("%(asctime)s - %(name)s - %(levelname)s - %(message)s", None),
}

_level_override: Optional[str] = None


def resolve_level(level: Optional[str] = None) -> int:
    """
    Numeric log level for ``level``, the CLI override or ``LOG_LEVEL``.

    Unknown names fall back to INFO.
    """
    name = level or _level_override or os.getenv("LOG_LEVEL", "INFO")
    resolved = logging.getLevelName(name.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _in_namespace(name: str) -> bool:
    return name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + ".")


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a logger with a stdout handler.

    The level is set when the logger is first configured, or whenever
    ``level`` is passed explicitly; later calls without a level keep it.

    Args:
        name: Logger name (defaults to "image-variants")
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured" or "simple")

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type ("structured" or "simple")
    """
    logger = logging.getLogger(name)
    first_setup = not logger.handlers

    if level or first_setup:
        logger.setLevel(resolve_level(level))

    if first_setup:
        format_name = os.getenv("LOG_FORMAT", format_type).lower()
        fmt, datefmt = LOG_FORMATS.get(format_name, LOG_FORMATS["simple"])
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(component: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Logger for a component, namespaced under ``image-variants``."""
    if not _in_namespace(component):
        component = f"{ROOT_LOGGER_NAME}.{component}"
    return setup_logger(component)


def set_level(level: Optional[str]) -> None:
    """
    Apply ``level`` to every image-variants logger, existing and future.

    ``None`` clears the override; loggers configured since keep their level.
    """
    global _level_override
    _level_override = level
    if level is None:
        return
    for name in list(logging.Logger.manager.loggerDict):
        if _in_namespace(name):
            logging.getLogger(name).setLevel(resolve_level(level))


logger = setup_logger()
