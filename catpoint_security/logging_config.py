"""Centralized logging configuration for the home security system."""

import logging
import logging.handlers
import os
import sys
from typing import Optional, Dict
from pathlib import Path

from .config.defaults import SYSTEM_CONSTANTS

LOGGER_PREFIX = "catpoint"


class StructuredFormatter(logging.Formatter):
    """Custom formatter that adds structured information to log records."""

    def __init__(self, include_context: bool = True):
        self.include_context = include_context
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured information."""
        base_format = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"

        if self.include_context and hasattr(record, 'context'):
            context_str = " | ".join([f"{k}={v}" for k, v in record.context.items()])
            base_format += f" | Context: {context_str}"

        if record.levelno >= logging.ERROR and record.exc_info:
            base_format += " | %(pathname)s:%(lineno)d"

        formatter = logging.Formatter(base_format)
        return formatter.format(record)


class ContextFilter(logging.Filter):
    """Filter that adds system context to log records."""

    def __init__(self, component_name: Optional[str] = None):
        super().__init__()
        self.component_name = component_name
        self.process_id = os.getpid()

    def filter(self, record: logging.LogRecord) -> bool:
        record.process_id = self.process_id
        if self.component_name:
            record.component = self.component_name
        return True


class LoggingManager:
    """Centralized logging management.

    Console logging is always installed. When ``log_dir`` is given, a rotating
    main log and a rotating error-only log are written there as well.
    """

    def __init__(self, log_dir: Optional[str] = None, log_level: int = logging.INFO):
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_level = log_level
        self.max_log_size = SYSTEM_CONSTANTS["LOG_ROTATION_SIZE_MB"] * 1024 * 1024
        self.backup_count = SYSTEM_CONSTANTS["LOG_BACKUP_COUNT"]

        self.main_log_file: Optional[Path] = None
        self.error_log_file: Optional[Path] = None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.main_log_file = self.log_dir / "security.log"
            self.error_log_file = self.log_dir / "errors.log"

        self.component_loggers: Dict[str, logging.Logger] = {}
        self._handlers = []

        self._setup_package_logger()

    def _setup_package_logger(self) -> None:
        """Attach handlers to the package logger."""
        package_logger = logging.getLogger(LOGGER_PREFIX)
        package_logger.setLevel(self.log_level)

        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(StructuredFormatter(include_context=False))
        self._add_handler(package_logger, console_handler)

        if self.main_log_file is not None:
            main_file_handler = logging.handlers.RotatingFileHandler(
                self.main_log_file,
                maxBytes=self.max_log_size,
                backupCount=self.backup_count
            )
            main_file_handler.setLevel(logging.DEBUG)
            main_file_handler.setFormatter(StructuredFormatter(include_context=True))
            self._add_handler(package_logger, main_file_handler)

            error_file_handler = logging.handlers.RotatingFileHandler(
                self.error_log_file,
                maxBytes=self.max_log_size,
                backupCount=self.backup_count
            )
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(StructuredFormatter(include_context=True))
            self._add_handler(package_logger, error_file_handler)

    def _add_handler(self, target: logging.Logger, handler: logging.Handler) -> None:
        target.addHandler(handler)
        self._handlers.append(handler)

    def get_component_logger(self, component_name: str) -> logging.Logger:
        """Get or create a logger for a specific component."""
        if component_name in self.component_loggers:
            return self.component_loggers[component_name]

        logger = logging.getLogger(f"{LOGGER_PREFIX}.{component_name}")
        logger.addFilter(ContextFilter(component_name))

        self.component_loggers[component_name] = logger
        return logger

    def set_log_level(self, level: int) -> None:
        """Set the log level for the package and its handlers."""
        self.log_level = level
        logging.getLogger(LOGGER_PREFIX).setLevel(level)
        for handler in self._handlers:
            if not isinstance(handler, logging.handlers.RotatingFileHandler):
                handler.setLevel(level)

    def close(self) -> None:
        """Detach and close every handler installed by this manager."""
        package_logger = logging.getLogger(LOGGER_PREFIX)
        for handler in self._handlers:
            package_logger.removeHandler(handler)
            handler.close()
        self._handlers = []


# Global logging manager instance (console only until setup_logging is called)
logging_manager = LoggingManager()


def get_logger(component_name: str) -> logging.Logger:
    """Convenience function to get a component logger."""
    return logging_manager.get_component_logger(component_name)


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = None) -> LoggingManager:
    """Setup centralized logging system."""
    global logging_manager

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    component_loggers = logging_manager.component_loggers
    logging_manager.close()

    logging_manager = LoggingManager(log_dir, numeric_level)
    logging_manager.component_loggers.update(component_loggers)

    return logging_manager
