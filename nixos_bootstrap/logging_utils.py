from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default
LOG_PATH_ENV = "BOOTSTRAP_LOG"


class ConsoleFormatter(logging.Formatter):
    """Operator-facing output: timestamped progress, marked warnings/errors."""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if record.levelno >= logging.ERROR:
            line = f"[ERROR] {msg}"
        elif record.levelno >= logging.WARNING:
            line = f"[WARN] {msg}"
        else:
            line = f"[{self.formatTime(record, self.datefmt)}] {msg}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Every command and decision goes to the log file; the console gets a
    terser rendering for the operator.

    Notes:
    - Live installer media may not allow writing to /var/log. We still
      *attempt* it first; on failure we fall back to a file in the working
      directory.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_nixos_bootstrap_configured", False):
        return getattr(logger, "_nixos_bootstrap_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError:
        chosen_path = str(Path.cwd() / "nixos-bootstrap.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(ConsoleFormatter())
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_nixos_bootstrap_configured", True)
    setattr(logger, "_nixos_bootstrap_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
