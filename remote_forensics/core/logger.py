#!/usr/bin/env python3
"""
Acquisition Logging System
Console/file logging plus an append-only audit trail of job outcomes
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from remote_forensics.core.time_utils import utc_isoformat, utc_slug

ROOT_LOGGER = "remote_forensics"


class ForensicFormatter(logging.Formatter):
    """Custom formatter with color support for console"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_color: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_color = use_color

    def format(self, record):
        if self.use_color and sys.stdout.isatty():
            levelname = record.levelname
            if levelname in self.COLORS:
                record.levelname = (
                    f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
                )
        return super().format(record)


def setup_logging(
    log_dir: Optional[Path] = None,
    level: str = "INFO",
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Setup acquisition logging

    Args:
        log_dir: Directory for the run log (normally the evidence directory)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Enable file logging
        log_to_console: Enable console logging

    Returns:
        Logger instance
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)

    logger.handlers.clear()

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(ForensicFormatter(use_color=True))
        logger.addHandler(console_handler)

    if log_to_file and log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f"remote_forensics_{utc_slug()}.log"

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)  # Always DEBUG for file
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")

    return logger


class AuditLogger:
    """
    Append-only record of every acquisition attempt

    One line per job: method, job name, target, outcome and report path.
    Audit lines never propagate to the console logger.
    """

    def __init__(self, audit_log_path: Path):
        self.audit_log_path = Path(audit_log_path)
        self.audit_log_path.parent.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger(f"{ROOT_LOGGER}.audit.{self.audit_log_path}")
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False

        if not self.logger.handlers:
            handler = logging.FileHandler(self.audit_log_path, mode="a")
            handler.setFormatter(
                logging.Formatter(
                    fmt="%(asctime)s - AUDIT - %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            self.logger.addHandler(handler)

    def log(self, event: str, details: dict = None):
        message = f"{event}"
        if details:
            message += f" | Details: {json.dumps(details, sort_keys=True, default=str)}"

        self.logger.info(message)

    def log_attempt(
        self,
        method: str,
        job: str,
        target: str,
        success: bool,
        report_path: Optional[Path] = None,
    ):
        """Record the outcome of one job run through one access method"""
        self.log(
            f"ACQUISITION: {method} {job}",
            {
                "target": target,
                "success": success,
                "report_path": str(report_path) if report_path else None,
                "timestamp": utc_isoformat(),
            },
        )

    def close(self):
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get logger for a specific module

    Args:
        module_name: Module name

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{ROOT_LOGGER}.{module_name}")
