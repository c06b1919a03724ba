"""
ARM Emulator — Logging Setup

Same pattern as the other KingAI tools: a rich console handler for the
interesting stuff plus an optional plain-text log file that captures
everything.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    name: str = "arm_emulator",
    level: int = logging.DEBUG,
    console_level: int = logging.INFO,
    log_file: Optional[Path] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Child loggers (``arm_emulator.emu``, ``arm_emulator.periph.gpio``)
    propagate here, so one call covers the whole emulator. Calling it
    again replaces the handlers instead of stacking them.
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(fh)

    # ── Console handler ──
    if rich_console:
        ch = RichHandler(
            level=console_level,
            show_time=False,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        ch.setFormatter(logging.Formatter("%(message)s"))
    else:
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter("%(message)s"))
    ch.setLevel(console_level)
    logger.addHandler(ch)

    logger.debug("Logger initialized: %s (console level %s)",
                 name, logging.getLevelName(console_level))
    if log_file is not None:
        logger.debug("Log file: %s", log_file)
    return logger
