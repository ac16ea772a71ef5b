"""Logging helpers for proxy-installer."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from proxy_installer.security.redact import redact_text

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

BLUE = "\033[34m"
GREEN = "\033[32m"
RED = "\033[31m"
YELLOW = "\033[33m"
RESET = "\033[0m"

LOGGER_NAME = "proxy_installer"


class ColorFormatter(logging.Formatter):
    """Console formatter that prints ``[LEVEL] message`` with ANSI colors."""

    COLORS = {
        "DEBUG": BLUE,
        "INFO": BLUE,
        "SUCCESS": GREEN,
        "WARNING": YELLOW,
        "ERROR": RED,
        "CRITICAL": RED,
    }

    def __init__(self, use_color: bool = True):
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        label = f"[{record.levelname}]"
        if self.use_color:
            label = f"{self.COLORS.get(record.levelname, '')}{label}{RESET}"
        return f"{label} {message}"


class RedactingFilter(logging.Filter):
    """Mask credentials before a record reaches any handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact_text(record.getMessage())
        record.args = None
        return True


def _build_file_formatter() -> logging.Formatter:
    return logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def setup_logging(
    log_dir: str | Path,
    log_name: Optional[str] = None,
    *,
    verbose: bool = False,
) -> Path:
    """Initialize console and file logging.

    Parameters
    ----------
    log_dir:
        Directory where the timestamped run log is stored.
    log_name:
        Base name of the log file without extension. Defaults to
        ``provision-<timestamp>``.
    verbose:
        Also show DEBUG records (every executed command) on the console.

    Returns
    -------
    pathlib.Path
        Path of the log file for this run.
    """

    log_directory = Path(log_dir)
    log_directory.mkdir(parents=True, exist_ok=True)
    if log_name is None:
        log_name = f"provision-{datetime.now().strftime('%Y%m%d-%H%M%S')}"
    log_file = log_directory / f"{log_name}.log"

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    redactor = RedactingFilter()

    # Repeated initialization replaces the previous handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColorFormatter(use_color=sys.stdout.isatty()))
    console_handler.addFilter(redactor)
    logger.addHandler(console_handler)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_build_file_formatter())
    file_handler.addFilter(redactor)
    logger.addHandler(file_handler)

    logger.debug("Logging initialized: %s", log_file)
    return log_file


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger under the ``proxy_installer`` hierarchy."""

    base = logging.getLogger(LOGGER_NAME)
    if name and name.startswith(f"{LOGGER_NAME}."):
        name = name[len(LOGGER_NAME) + 1:]
    return base.getChild(name) if name else base


def log_success(logger: logging.Logger, message: str, *args) -> None:
    """以绿色输出成功提示。Log ``message`` at the SUCCESS level."""

    logger.log(SUCCESS, message, *args)
