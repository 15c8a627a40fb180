"""Logging configuration for the photo studio backend."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import colorlog

ROOT_LOGGER = "photo_studio"
AUDIT_LOGGER = "photo_studio.audit"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
AUDIT_FORMAT = "%(asctime)s - AUDIT - %(message)s"

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}

# Third-party loggers that are too chatty at INFO for a studio server
QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "PIL")

MB = 1024 * 1024


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter,
                      max_mb: int = 10, backups: int = 5) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_mb * MB, backupCount=backups, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    enable_color: bool = True,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """Configure the ``photo_studio`` logger tree.

    Console output goes to stdout (colored through colorlog when enabled).
    With a log directory, ``photo_studio.log`` receives everything from
    DEBUG up, ``errors.log`` only errors, and ``audit.log`` the records of
    :func:`audit_log`, which never reach the other handlers.
    """
    level = getattr(logging, log_level.upper())
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    if enable_color:
        console_formatter = colorlog.ColoredFormatter(
            f"%(log_color)s{CONSOLE_FORMAT}", datefmt=DATE_FORMAT, log_colors=LOG_COLORS
        )
    else:
        console_formatter = logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    audit_logger = logging.getLogger(AUDIT_LOGGER)
    audit_logger.setLevel(logging.INFO)
    audit_logger.propagate = False
    audit_logger.handlers.clear()

    if enable_file_logging and log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_formatter = logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)

        logger.addHandler(_rotating_handler(log_dir / "photo_studio.log", logging.DEBUG, file_formatter))
        logger.addHandler(_rotating_handler(log_dir / "errors.log", logging.ERROR, file_formatter))
        audit_logger.addHandler(_rotating_handler(
            log_dir / "audit.log",
            logging.INFO,
            logging.Formatter(AUDIT_FORMAT, datefmt=DATE_FORMAT),
            max_mb=50,
            backups=10,
        ))

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``photo_studio`` tree."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER)


def audit_log(operation: str, **details) -> None:
    """Record a security-relevant action, e.g. ``BOOKING_STATUS_CHANGED - booking_id=... new=approved``."""
    detail_str = " ".join(f"{key}={value}" for key, value in details.items() if value is not None)
    get_audit_logger().info(f"{operation} - {detail_str}" if detail_str else operation)
