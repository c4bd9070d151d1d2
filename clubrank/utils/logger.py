"""
Logging setup for the ranking engine.

Handlers live on the package logger ("clubrank") and are attached once;
module loggers returned by setup_logger propagate to it.
"""

import logging
import sys
from datetime import date
from pathlib import Path

from clubrank.config import Config

PACKAGE_LOGGER = 'clubrank'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _daily_log_path() -> Path:
    log_dir = Path(Config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f'clubrank_{date.today():%Y%m%d}.log'


def _configure_package_logger() -> logging.Logger:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if package_logger.handlers:
        return package_logger

    level = logging.DEBUG if Config.DEBUG else logging.INFO
    package_logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    package_logger.addHandler(console)

    # File gets everything, including DEBUG, regardless of Config.DEBUG
    if Config.LOG_TO_FILE:
        file_handler = logging.FileHandler(_daily_log_path(), encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger


def setup_logger(name: str) -> logging.Logger:
    """Return a logger for name, attaching the package handlers on first use"""
    _configure_package_logger()
    return logging.getLogger(name)
