"""Logging set-up for the gas transport library.

All library modules log through children of the ``mcgas_transport`` logger,
so a single call to :func:`setup_logger` configures the whole package.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = 'mcgas_transport'

CONSOLE_FORMAT = '%(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _as_level(level: Union[int, str]) -> int:
    """Convert 'debug', 'INFO', 20, ... into a numeric logging level."""
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        if not isinstance(value, int):
            raise ValueError(f"Unknown logging level: {level}")
        return value
    return int(level)


def setup_logger(
    name: str = ROOT_LOGGER,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    console_level: Optional[Union[int, str]] = None,
    file_level: Union[int, str] = logging.DEBUG
) -> logging.Logger:
    """Attach a console handler and an optional file handler.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        name: Logger name, the package root by default
        level: Threshold of the logger itself
        log_file: Path of a log file; parent directories are created
        console_level: Threshold of the console handler, defaults to ``level``
        file_level: Threshold of the file handler

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(_as_level(level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(_as_level(level if console_level is None else console_level))
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setLevel(_as_level(file_level))
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    return logger


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Logger of the package, or of one of its components.

    Args:
        component: Dotted suffix such as ``'physics.mixer'``

    Returns:
        ``mcgas_transport`` or ``mcgas_transport.<component>``
    """
    if not component:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")
