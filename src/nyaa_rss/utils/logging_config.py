"""Logging setup for the command line tool"""

import logging
import sys
from pathlib import Path

from loguru import logger
from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Shared Rich console for result output."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def setup_logging(debug: bool = False, log_dir: str | None = None) -> None:
    """Configure loguru and route stdlib logging into it.

    Library modules log through ``logging.getLogger(__name__)``; this only
    decides where those records end up.

    Args:
        debug: Log DEBUG and above to the console instead of WARNING.
        log_dir: Also write a rotating DEBUG log file into this directory.
    """
    logger.remove()

    def shorten_name(record):
        """Drop the nyaa_rss prefix from module paths"""
        name = record["name"]
        parts = name.split(".")
        if len(parts) > 1 and parts[0] == "nyaa_rss":
            record["extra"]["short_name"] = ".".join(parts[1:])
        else:
            record["extra"]["short_name"] = name
        return True

    # stderr, so that results on stdout stay pipeable
    console_format = (
        "<green>{time:HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[short_name]}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "WARNING",
        format=console_format,
        colorize=True,
        filter=shorten_name,
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path / "nyaa_rss.log"),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
            encoding="utf-8",
            delay=True,
        )

    _intercept_standard_logging()
    _suppress_noisy_loggers()


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _intercept_standard_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def _suppress_noisy_loggers() -> None:
    for name in ("aiohttp", "aiohttp.client", "asyncio", "charset_normalizer"):
        logging.getLogger(name).setLevel(logging.WARNING)
