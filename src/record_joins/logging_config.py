"""
Logging Configuration for record_joins.

Provides centralized logger setup for the debug trace log.
Handlers are only attached when RECORD_JOINS_DEBUG_LOG is set to a
non-empty value; otherwise module loggers stay silent and propagate.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

DEBUG_TRACE_LOGGER_NAME = "record_joins.debug_trace"

_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


# Log directory priority:
# 1. RECORD_JOINS_LOG_DIR (explicit)
# 2. RECORD_JOINS_PROJECT_ROOT/.record_joins (if set)
# 3. CWD/.record_joins (fallback)
def _get_log_directory() -> Path:
    """Get the log directory path."""
    log_dir = os.getenv("RECORD_JOINS_LOG_DIR")
    if not log_dir:
        project_root = os.getenv("RECORD_JOINS_PROJECT_ROOT")
        if project_root:
            log_dir = str(Path(project_root) / ".record_joins")
        else:
            log_dir = str(Path.cwd() / ".record_joins")
    return Path(log_dir)


def _ensure_log_directory() -> Path:
    """Ensure log directory exists and return its path."""
    log_dir = _get_log_directory()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def is_debug_log_enabled() -> bool:
    """Debug logging is opt-in: RECORD_JOINS_DEBUG_LOG must be non-empty."""
    return bool(os.getenv("RECORD_JOINS_DEBUG_LOG"))


def _create_file_handler(log_filename: str) -> Optional[logging.FileHandler]:
    """
    Create a file handler for the specified log file.

    Args:
        log_filename: Name of the log file (e.g., 'debug_trace.log')

    Returns:
        Configured FileHandler, or None if the directory cannot be created
    """
    try:
        log_dir = _ensure_log_directory()
    except OSError:
        return None
    handler = logging.FileHandler(log_dir / log_filename, mode='a', encoding='utf-8')
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FORMAT))
    return handler


class FlushingStreamHandler(logging.StreamHandler):
    """StreamHandler that flushes after every emit.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a handler.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    def emit(self, record):
        super().emit(record)
        self.flush()


def _create_stderr_handler() -> logging.StreamHandler:
    """Create a stderr handler for console output with auto-flush."""
    handler = FlushingStreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FORMAT))
    return handler


_stderr_suppressed = False


def get_debug_trace_logger() -> logging.Logger:
    """
    Get the debug trace logger for grouping and join operations.

    Output goes to <log dir>/debug_trace.log and stderr when
    RECORD_JOINS_DEBUG_LOG is set.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(DEBUG_TRACE_LOGGER_NAME)

    # Only configure once
    if not logger.handlers and is_debug_log_enabled():
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        file_handler = _create_file_handler("debug_trace.log")
        if file_handler:
            logger.addHandler(file_handler)

        stderr_handler = _create_stderr_handler()
        if _stderr_suppressed:
            stderr_handler.setLevel(logging.CRITICAL + 1)
        logger.addHandler(stderr_handler)

    return logger


def configure_logger_for_debug_trace(logger_name: str) -> logging.Logger:
    """
    Configure a logger to also write to debug_trace.log.

    Args:
        logger_name: Name of the logger to configure (e.g., __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    trace_logger = get_debug_trace_logger()
    if trace_logger.handlers:
        logger.setLevel(logging.DEBUG)
        for handler in trace_logger.handlers:
            if handler not in logger.handlers:
                logger.addHandler(handler)
    return logger


def _package_loggers():
    for logger in list(logging.Logger.manager.loggerDict.values()):
        if (isinstance(logger, logging.Logger)
                and logger.name.startswith("record_joins.")
                and logger.name != DEBUG_TRACE_LOGGER_NAME):
            yield logger


def wire_debug_trace_loggers() -> logging.Logger:
    """
    Attach the debug trace handlers to every record_joins module logger.

    Module loggers are wired when their module is imported. Call this after
    RECORD_JOINS_DEBUG_LOG has been set later (e.g. from record_joins.json)
    so operators imported earlier also write to debug_trace.log.

    Returns:
        The debug trace logger
    """
    trace_logger = get_debug_trace_logger()
    if trace_logger.handlers:
        for logger in _package_loggers():
            configure_logger_for_debug_trace(logger.name)
    return trace_logger


def reset_debug_trace_logger() -> None:
    """
    Close and detach the debug trace handlers.

    Call after changing RECORD_JOINS_DEBUG_LOG or RECORD_JOINS_LOG_DIR so the
    next get_debug_trace_logger() call picks up the new settings.
    """
    trace_logger = logging.getLogger(DEBUG_TRACE_LOGGER_NAME)
    handlers = trace_logger.handlers[:]
    for handler in handlers:
        handler.close()
        trace_logger.removeHandler(handler)
    trace_logger.propagate = True

    for logger in _package_loggers():
        wired = [handler for handler in handlers if handler in logger.handlers]
        for handler in wired:
            logger.removeHandler(handler)
        if wired:
            logger.setLevel(logging.NOTSET)


def is_stderr_suppressed() -> bool:
    """Check if stderr logging is currently suppressed."""
    return _stderr_suppressed


def suppress_stderr_logging():
    """
    Suppress stderr logging for the debug trace logger.

    File logging continues to work normally.
    """
    global _stderr_suppressed
    _stderr_suppressed = True
    for handler in logging.getLogger(DEBUG_TRACE_LOGGER_NAME).handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(logging.CRITICAL + 1)  # Effectively disable


def restore_stderr_logging():
    """Restore stderr logging for the debug trace logger."""
    global _stderr_suppressed
    _stderr_suppressed = False
    for handler in logging.getLogger(DEBUG_TRACE_LOGGER_NAME).handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(logging.DEBUG)
