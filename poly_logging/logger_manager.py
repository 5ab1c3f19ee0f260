"""
Centralized logging for the Polymath client.

Provides a human-readable formatter and per-component log files under
logs/<Module_Folder>/.

Usage:
    from poly_logging.logger_manager import setup_module_logger

    logger = setup_module_logger('customers', 'customers.log', module_folder='Contract_Logs')
"""

import logging
import os
from pathlib import Path

from config.loader import get_config

# Resolve project root
_PROJECT_ROOT = Path(__file__).parent.parent

_LOG_DIR = str(_PROJECT_ROOT / get_config().get_app_config().get("logging", {}).get("log_dir", "logs"))


# ============================================================================
# FORMATTERS
# ============================================================================


class HumanReadableFormatter(logging.Formatter):
    """Pretty-printed log formatter for console and log files."""

    FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self) -> None:
        super().__init__(fmt=self.FORMAT, datefmt=self.DATE_FORMAT)


# ============================================================================
# LOGGER FACTORY
# ============================================================================

_logger_cache: dict[str, logging.Logger] = {}


def setup_module_logger(
    name: str,
    log_file: str,
    level: int = logging.INFO,
    module_folder: str | None = None,
    console: bool = False,
) -> logging.Logger:
    """
    Create a component logger with a file handler and an optional console handler.

    Args:
        name: Logger name (should be unique per component).
        log_file: Log filename (placed inside module_folder if specified).
        level: Logging level (default INFO).
        module_folder: Subfolder within logs/ directory (e.g., 'Contract_Logs').
        console: Also log to stderr (used by the CLI).

    Returns:
        Configured logging.Logger instance.
    """
    # Return cached logger if already created
    cache_key = f"{name}:{module_folder}:{log_file}"
    if cache_key in _logger_cache:
        return _logger_cache[cache_key]

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        _logger_cache[cache_key] = logger
        return logger

    # Determine log file path
    if module_folder:
        log_path = os.path.join(_LOG_DIR, module_folder, log_file)
    else:
        log_path = os.path.join(_LOG_DIR, log_file)
    os.makedirs(os.path.dirname(log_path), exist_ok=True)

    formatter = HumanReadableFormatter()

    # File handler
    file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    _logger_cache[cache_key] = logger
    return logger
