"""Logging setup: rich console output plus an optional plain log file."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "imgsync"

LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return LEVEL_MAP.get(level.upper(), logging.INFO)


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """
    Configure the imgsync logger.

    Safe to call more than once; previously installed handlers are replaced.

    Args:
        level: Logging level name (DEBUG, INFO, ...) or constant
        log_file: Optional file to append plain-text logs to
        console: Rich console for the console handler (stderr by default)

    Returns:
        The configured imgsync logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(_parse_level(level))

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger
