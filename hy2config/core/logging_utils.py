from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_file: Path, level: int = logging.INFO, console: bool = True) -> None:
    """
    Basic logging setup for the application.

    Loggers write to the specified file and, unless disabled, to stdout.
    Calling it again does not add duplicate handlers.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    log_file_resolved = str(log_file.resolve())
    has_file_handler = any(
        isinstance(h, logging.FileHandler)
        and str(Path(h.baseFilename).resolve()) == log_file_resolved
        for h in root_logger.handlers
    )
    has_console_handler = any(
        type(h) is logging.StreamHandler and h.stream is sys.stdout
        for h in root_logger.handlers
    )

    if not has_file_handler:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)
    if console and not has_console_handler:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    app_logger = logging.getLogger("hy2config")
    app_logger.propagate = True
    if app_logger.level == logging.NOTSET or app_logger.level > level:
        app_logger.setLevel(logging.NOTSET)
