# logger.py
# Loguru setup: coloured console output plus daily JSON-lines files.
"""Logging configuration shared by the whole bot."""
import json
import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

from config import settings

log_dir = Path(settings.LOG_DIR)
log_dir.mkdir(parents=True, exist_ok=True)


class JsonLogFile:
    """Append-only JSON log file rotated by calendar date."""

    def __init__(self, base_path: Path):
        self.base_path = base_path
        self.current_date = None
        self.file_handle = None

    def write(self, message: str):
        """Write a line, switching to a new file when the date changes."""
        current_date = datetime.now().strftime("%Y-%m-%d")
        if self.current_date != current_date or self.file_handle is None:
            if self.file_handle:
                self.file_handle.close()
            self.current_date = current_date
            filename = self.base_path / f"relaybot_{current_date}.json.log"
            self.file_handle = open(filename, "a", encoding="utf-8")
        self.file_handle.write(message)
        self.file_handle.flush()

    def close(self):
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None


json_log_file = JsonLogFile(log_dir)

_RESERVED_KEYS = {"time", "level", "message", "name", "function", "line", "exception"}


def format_json_record(record) -> str:
    """Serialize a loguru record into a single JSON line."""
    log_entry = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["name"],
        "function": record["function"],
        "line": record["line"],
    }
    if record["exception"]:
        log_entry["exception"] = str(record["exception"])
    for key, value in record.get("extra", {}).items():
        if key not in _RESERVED_KEYS:
            log_entry[key] = value
    return json.dumps(log_entry, ensure_ascii=False, default=str) + "\n"


def json_sink(message):
    """Loguru sink writing JSON lines into the dated log file."""
    json_log_file.write(format_json_record(message.record))


# - Loguru handlers -
logger.remove()

logger.add(sink=json_sink, level="DEBUG", backtrace=True, diagnose=False)

logger.add(
    sink=sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>",
    level=settings.LOG_LEVEL,
    backtrace=True,
    diagnose=False,
)

__all__ = ["logger", "json_log_file", "format_json_record"]
