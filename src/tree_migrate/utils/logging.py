"""Logging setup for Tree Migrate.

Every module logs through the shared loguru logger bound with a
``component`` (``logger.bind(component='GitDiffEngine')``). Records logged
without one are attributed to ``tree-migrate``.
"""

import re
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.config import LoggingConfig

DEFAULT_COMPONENT = 'tree-migrate'

CONSOLE_FORMAT = (
    '<green>{time:HH:mm:ss}</green> | '
    '<level>{level: <8}</level> | '
    '<cyan>{extra[component]}</cyan> | '
    '<level>{message}</level>'
)

_MARKUP_RE = re.compile(r'</?[a-z]+>')


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """Replace the loguru sinks with a stderr sink and an optional file sink.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        log_format: Format for both sinks; color tags are stripped for the file
    """
    logger.remove()
    logger.configure(extra={'component': DEFAULT_COMPONENT})

    console_format = log_format or CONSOLE_FORMAT
    logger.add(sys.stderr, format=console_format, level=level, colorize=True)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=_MARKUP_RE.sub('', console_format),
            level=level,
            rotation='10 MB',
            retention='30 days',
            encoding='utf-8',
        )

    logger.bind(component='logging').debug(
        f'Logging at {level}' + (f' to {log_file}' if log_file else '')
    )


def configure_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Apply a LoggingConfig; verbose forces DEBUG."""
    setup_logging(
        level='DEBUG' if verbose else config.level,
        log_file=config.file,
        log_format=config.format,
    )
