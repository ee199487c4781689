"""
Logging setup shared by the extractor, renderer, CLI and API.
"""
import logging
import os
import sys
import threading


_run_ctx = threading.local()

# Log files live in logs/ at the project root
LOGS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "logs")
os.makedirs(LOGS_DIR, exist_ok=True)
DEFAULT_LOG_FILE = os.path.join(LOGS_DIR, "playlist_probe.log")

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level_from_env() -> int:
    """Get log level from PLAYLIST_PROBE_LOG_LEVEL or LOG_LEVEL."""
    level_str = os.environ.get("PLAYLIST_PROBE_LOG_LEVEL") or os.environ.get("LOG_LEVEL") or "INFO"
    return LOG_LEVEL_MAP.get(level_str.upper(), logging.INFO)


def set_run_id(run_id: int | str | None) -> None:
    """Tag log records emitted by the current thread with an extraction run id."""
    if run_id is None:
        clear_run_id()
        return
    _run_ctx.run_id = str(run_id)


def clear_run_id() -> None:
    if hasattr(_run_ctx, "run_id"):
        delattr(_run_ctx, "run_id")


def get_run_id() -> str:
    return getattr(_run_ctx, "run_id", "-")


class InjectRunIdFilter(logging.Filter):
    """Injects run_id into LogRecord (thread-local), defaulting to '-'"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = get_run_id()
        return True


def setup_logger(name="playlist_probe", level=None, log_file=None):
    """Configure and return the project logger.

    Args:
        name: Logger name
        level: Log level (if None, read from environment variable)
        log_file: Log file path (if None, use default in logs/ directory)
    """
    if level is None:
        level = get_log_level_from_env()

    if log_file is None:
        log_file = DEFAULT_LOG_FILE

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(isinstance(f, InjectRunIdFilter) for f in logger.filters):
        logger.addFilter(InjectRunIdFilter())

    # Avoid stacking handlers on re-import
    if logger.hasHandlers():
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - [run %(run_id)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(InjectRunIdFilter())
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(InjectRunIdFilter())
    logger.addHandler(console_handler)

    return logger


logger = setup_logger()
