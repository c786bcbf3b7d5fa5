import logging
import os
import sys
from contextvars import ContextVar
from typing import Optional
from zoneinfo import ZoneInfo

LOG_TZ = ZoneInfo(os.getenv("LOG_TIMEZONE", "UTC"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}
DEFAULT_LEVEL = LOG_LEVEL_MAP.get(LOG_LEVEL, logging.INFO)
LOG_JSON = os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes")

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_request_id(request_id: str):
    return _request_id.set(request_id)


def reset_request_id(token) -> None:
    _request_id.reset(token)


def get_request_id() -> Optional[str]:
    return _request_id.get()


MODULE_COLORS = {
    "api":        "\033[94m",
    "core":       "\033[96m",
    "intent":     "\033[95m",
    "ml":         "\033[92m",
    "embeddings": "\033[93m",
    "app":        "\033[97m",
}

MODULE_ABBREV = {
    "api": "API",
    "core": "COR",
    "intent": "INT",
    "ml": "MDL",
    "embeddings": "EMB",
    "app": "APP",
}

ABBREV = {

    "request": "req",
    "response": "res",
    "message": "msg",
    "error": "err",
    "config": "cfg",
    "connection": "conn",
    "timeout": "tout",
    "embedding": "emb",
    "confidence": "conf",
    "classifier": "clf",
    "feedback": "fb",
    "initialization": "init",
    "milliseconds": "ms",
    "seconds": "sec",
    "count": "cnt",
    "length": "len",
    "received": "recv",
    "success": "ok",
    "failure": "fail",
    "completed": "done",
    "started": "start",
    "finished": "fin",
    "query": "qry",
    "result": "res",
    "latency": "lat",
    "duration": "dur",
    "provider": "prov",
    "model": "mdl",
}


def abbreviate(text: str) -> str:

    result = text
    for full, abbr in ABBREV.items():

        result = result.replace(full.capitalize(), abbr.upper())
        result = result.replace(full, abbr)
    return result


class Colors:

    @staticmethod
    def _enabled() -> bool:

        if os.getenv("NO_COLOR"):
            return False
        return sys.stdout.isatty()


_COLORS = {
    "RESET": "\033[0m",
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
    "TIME": "\033[90m",
    "MODULE": "\033[34m",
    "KEY": "\033[90m",
    "VALUE": "\033[37m",
    "MODEL": "\033[95m",
    "SCORE": "\033[96m",
    "SUCCESS": "\033[92m",
    "SEPARATOR": "\033[90m",
}

LEVEL_STYLES = {
    "DEBUG": ("DEBUG", "DEBUG"),
    "INFO": (" INFO", "INFO"),
    "WARNING": (" WARN", "WARNING"),
    "ERROR": ("ERROR", "ERROR"),
    "CRITICAL": ("CRIT!", "CRITICAL"),
}
