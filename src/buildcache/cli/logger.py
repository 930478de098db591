"""Logging helpers for the buildcache CLI."""

from __future__ import annotations

import logging
import os
import sys

import colorlog

LOG_COLORS = {
    "DEBUG": "bold_cyan",
    "INFO": "bold_green",
    "WARNING": "bold_yellow",
    "ERROR": "bold_red",
    "CRITICAL": "bold_red,bg_white",
}


def _use_color() -> bool:
    if os.getenv("NO_COLOR") is not None:
        return False
    if not sys.stderr.isatty():
        return False
    return True


def _log_format(concise: bool, color: bool) -> str:
    start = "%(log_color)s" if color else ""
    reset = "%(reset)s" if color else ""
    if concise:
        return f"{start}%(levelname)s:{reset} %(message)s"
    return f"{start}[%(asctime)s] <%(name)s> %(levelname)s:{reset} %(message)s"


def configure_logging(verbose: bool, concise: bool = False) -> None:
    """
    Configure the root logger to write to stderr.

    Concise mode omits the timestamp and the logger name.
    """
    level = logging.DEBUG if verbose else logging.INFO
    datefmt = "%Y-%m-%d %H:%M:%S"
    color = _use_color()
    handler = logging.StreamHandler()
    if color:
        handler.setFormatter(
            colorlog.ColoredFormatter(
                fmt=_log_format(concise, color),
                log_colors=LOG_COLORS,
                datefmt=datefmt,
            )
        )
    else:
        handler.setFormatter(logging.Formatter(_log_format(concise, color), datefmt=datefmt))
    logging.basicConfig(level=level, handlers=[handler], force=True)
