"""Recent log lines kept in memory, and JSON results for the web interface."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any

DEFAULT_MAX_NUM = 50
STATUS_OK = 200
STATUS_INTERNAL_SERVER_ERROR = 500

_LOG_FORMAT = "%(asctime)s %(message)s"
_LOG_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def _go_json(value: Any) -> str:
    text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


@dataclass
class MemoryLogs:
    """The most recent ``max_num`` log entries."""

    max_num: int = DEFAULT_MAX_NUM
    logs: list[str] = field(default_factory=list)

    def write(self, text: str | bytes) -> int:
        """Append an entry, dropping the oldest beyond ``max_num``; return its length."""
        entry = text.decode("utf-8", "replace") if isinstance(text, (bytes, bytearray)) else text
        self.logs.append(entry)
        if len(self.logs) > self.max_num:
            del self.logs[: len(self.logs) - self.max_num]
        return len(text)

    def clear(self) -> None:
        """Remove every entry."""
        self.logs.clear()

    def to_json(self) -> str:
        """The entries as a JSON array."""
        return _go_json(self.logs)


@dataclass
class Result:
    """Status code, message and data returned to the web interface."""

    code: int
    msg: str
    data: Any = None

    def to_json(self) -> str:
        return _go_json({"Code": self.code, "Msg": self.msg, "Data": self.data}) + "\n"


def return_error(msg: str) -> str:
    """JSON body reporting an error."""
    return Result(STATUS_INTERNAL_SERVER_ERROR, msg).to_json()


def return_ok(msg: str, data: Any) -> str:
    """JSON body reporting success with ``data``."""
    return Result(STATUS_OK, msg, data).to_json()


MEMORY_LOGS = MemoryLogs()


class _MemoryLogHandler(logging.Handler):
    """Writes each record to the in-memory logs and to standard output."""

    def __init__(self, target: MemoryLogs) -> None:
        super().__init__()
        self.target = target
        self.setFormatter(logging.Formatter(_LOG_FORMAT, _LOG_DATE_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record) + "\n"
            self.target.write(line)
            sys.stdout.write(line)
        except Exception:
            self.handleError(record)


def _install(logger_name: str = "ddnskit") -> None:
    logger = logging.getLogger(logger_name)
    if not any(isinstance(h, _MemoryLogHandler) for h in logger.handlers):
        logger.addHandler(_MemoryLogHandler(MEMORY_LOGS))
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)


_install()