import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(value: str) -> int:
    """Unknown names fall back to INFO."""
    return _LEVELS.get(value.strip().lower(), logging.INFO)


def setup_logging(level: str = "info", log_file: str = "") -> logging.Logger:
    """Configure the root logger once at process start.

    Logs go to stderr because stdout carries the stdio transport. With
    ``log_file`` set, records are appended to that file instead.
    """
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.addHandler(handler)
    root.setLevel(parse_level(level))

    logger = logging.getLogger("census_mcp")
    logger.info("Logging configured", extra={"level": level, "output": log_file or "stderr"})
    return logger
