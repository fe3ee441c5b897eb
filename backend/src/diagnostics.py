"""Diagnostics — structured logging and faulthandler.

Layers:
1. Structured JSON logging with RotatingFileHandler (file)
2. Plain-text stderr logging for interactive CLI runs
3. faulthandler: C-level crash tracebacks (SIGSEGV, SIGABRT)
"""

import datetime
import faulthandler
import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

APP_DIR = "~/.pixsort"

# Maximum log age in days
MAX_LOG_AGE_DAYS = 7

LOG_FILE_NAME = "pixsort.log"
FAULT_FILE_NAME = "pixsort_fault.log"


def _validate_log_dir(env_dir: str) -> str:
    """Validate PIXSORT_LOG_DIR is under ~/.pixsort. Returns safe path."""
    default = os.path.expanduser(f"{APP_DIR}/logs")
    if env_dir:
        resolved = os.path.realpath(env_dir)
        allowed = os.path.realpath(os.path.expanduser(APP_DIR))
        if not resolved.startswith(allowed + os.sep) and resolved != allowed:
            logger.warning("PIXSORT_LOG_DIR outside allowed prefix, using default")
            return default
        return resolved
    return default


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(log_entry)


def _cleanup_old_logs(log_dir: str):
    """Delete log files older than MAX_LOG_AGE_DAYS."""
    cutoff = datetime.datetime.now() - datetime.timedelta(days=MAX_LOG_AGE_DAYS)
    try:
        for f in Path(log_dir).glob(f"{LOG_FILE_NAME}*"):
            if f.stat().st_mtime < cutoff.timestamp():
                f.unlink(missing_ok=True)
    except OSError:
        pass


def _resolve_level(level: str | None) -> int:
    name = (level or os.environ.get("PIXSORT_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def setup_structured_logging(log_dir: str | None = None, level: str | None = None) -> str:
    """Configure structured JSON logging with rotation.

    Args:
        log_dir: Override log directory (validated against ~/.pixsort prefix).
        level:   Log level name. Falls back to PIXSORT_LOG_LEVEL, then INFO.

    Returns:
        The directory logs are written to.
    """
    resolved_dir = _validate_log_dir(log_dir or os.environ.get("PIXSORT_LOG_DIR", ""))
    os.makedirs(resolved_dir, mode=0o700, exist_ok=True)

    # Rotating handler: 10MB max, 7 backups
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(resolved_dir, LOG_FILE_NAME),
        maxBytes=10_000_000,
        backupCount=7,
    )
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    root.addHandler(handler)

    _cleanup_old_logs(resolved_dir)

    return resolved_dir


def setup_console_logging(level: str | None = None) -> logging.Handler:
    """Human-readable stderr handler for CLI runs."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    handler.setLevel(_resolve_level(level))
    logging.getLogger().addHandler(handler)
    return handler


def setup_faulthandler(log_dir: str):
    """Enable faulthandler for C-level crash tracebacks.

    Uses a SEPARATE file from the main log (RotatingFileHandler would
    invalidate the faulthandler file descriptor on rotation).
    """
    fault_path = os.path.join(log_dir, FAULT_FILE_NAME)
    try:
        fault_file = open(fault_path, "a", buffering=1)  # noqa: SIM115
        os.chmod(fault_path, 0o600)
        faulthandler.enable(file=fault_file, all_threads=True)
    except OSError as e:
        print(f"WARNING: Could not enable faulthandler: {e}", file=sys.stderr)


def init_diagnostics(level: str | None = None) -> str:
    """Initialize all diagnostic layers. Call from main.py."""
    log_dir = setup_structured_logging(level=level)
    setup_console_logging(level)
    setup_faulthandler(log_dir)
    logger.info("Diagnostics initialized: logging=%s, faulthandler=enabled", log_dir)
    return log_dir
