"""Logging configuration for FCPXSub."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from .utils import ensure_dir_exists

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that flood DEBUG output (model download, numba JIT).
NOISY_LOGGERS = ("urllib3", "numba", "filelock")


def _reset_root(root: logging.Logger) -> None:
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


def _file_handler(log_dir: str, log_file: str, formatter: logging.Formatter,
                  max_bytes: int, backup_count: int) -> RotatingFileHandler:
    ensure_dir_exists(log_dir)
    handler = RotatingFileHandler(
        os.path.join(log_dir, log_file),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: int = logging.INFO,
    log_dir: str = "logs",
    log_file: str = "fcpxsub.log",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5
) -> Optional[str]:
    """
    Sends log records to stdout and to a rotating file under log_dir.

    Safe to call repeatedly: the CLI configures logging once from its flags
    and again after the config file names the log location. Each call
    replaces the root handlers installed by the previous one.

    Returns:
        The log file path, or None if only console logging could be set up.
    """
    root = logging.getLogger()
    _reset_root(root)
    root.setLevel(log_level)
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    console.setLevel(log_level)
    root.addHandler(console)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    try:
        file_handler = _file_handler(log_dir, log_file, formatter, max_bytes, backup_count)
    except Exception as e:
        root.error(f"File logging disabled, could not open {os.path.join(log_dir, log_file)}: {e}")
        return None
    root.addHandler(file_handler)
    root.info(f"Logging initialized. Log file: {file_handler.baseFilename}")
    return file_handler.baseFilename
