import sys
import os
from loguru import logger

# Flag to track if logging has been configured
_logging_configured = False


def is_sync_record(record):
    """Records emitted while a sync pass runs carry its number in extra."""
    return "sync_pass" in record["extra"]


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None, enable_sync_trace=None):
    """
    Configures the global logger.

    Console logging goes to stderr unless machine mode is on. File logging
    is opt-in via PROPSYNC_FILE_LOGGING=1 or enable_file_logging=True.

    Args:
        level: Logging level (default: INFO)
        suppress_console: If True, suppress console logging. If None, check PROPSYNC_MACHINE_MODE env var.
        enable_file_logging: If True, enable file logging. If None, check PROPSYNC_FILE_LOGGING env var.
        enable_sync_trace: If True, journal every sync pass at TRACE level as JSON lines.
            If None, check PROPSYNC_SYNC_TRACE env var.
    """
    global _logging_configured

    # Only configure once to avoid duplicate handlers
    if _logging_configured:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = os.getenv("PROPSYNC_MACHINE_MODE", "").lower() in ("1", "true", "yes")

    # Stream 1: Human-readable console output (only if not suppressed)
    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            colorize=True
        )

    # Stream 2: File logging is OPT-IN only
    if enable_file_logging is None:
        enable_file_logging = os.getenv("PROPSYNC_FILE_LOGGING", "").lower() in ("1", "true", "yes")

    if enable_file_logging:
        from propsync.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()

        logger.add(
            paths.logs_dir / "propsync.log",
            level="INFO",
            rotation="10 MB",
            retention="1 day",
            compression="gz",
            catch=True,
            serialize=False
        )

    # Stream 3: Sync pass journal, OPT-IN, one JSON record per line
    if enable_sync_trace is None:
        enable_sync_trace = os.getenv("PROPSYNC_SYNC_TRACE", "").lower() in ("1", "true", "yes")

    if enable_sync_trace:
        from propsync.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()

        logger.add(
            paths.logs_dir / "sync-trace.jsonl",
            level="TRACE",
            filter=is_sync_record,
            rotation="10 MB",
            retention="1 day",
            catch=True,
            serialize=True
        )


def reset_logging():
    """Allow setup_logging() to run again (used by tests and the CLI)."""
    global _logging_configured
    _logging_configured = False


# Configure the logger on import (will check env var for machine mode)
setup_logging()
