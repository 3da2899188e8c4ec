from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from traceback import format_exception

from .env import Env, get_env

# Context attributes callers may attach with ``extra=``.
CONTEXT_FIELDS = ("request_id", "user_id", "file_id", "object_id")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for prod log shipping."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        if record.exc_info and record.exc_info[0] is not None:
            stack = "".join(format_exception(*record.exc_info))
            limit = int(os.getenv("LOG_STACK_LIMIT", "4000"))
            payload["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stack": stack[:limit] + ("...(truncated)" if len(stack) > limit else ""),
            }

        return json.dumps(payload, ensure_ascii=False, default=str)


def _read_level(env: Env) -> str:
    explicit = os.getenv("LOG_LEVEL")
    if explicit:
        return explicit.upper()
    return "INFO" if env is Env.PROD else "DEBUG"


def _read_format(env: Env) -> str:
    fmt = os.getenv("LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "json" if env is Env.PROD else "plain"


def setup_logging(env: Env | None = None) -> None:
    env = env or get_env()
    level = _read_level(env)
    formatter = "json" if _read_format(env) == "json" else "plain"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "format": "%(asctime)s %(levelname)-5s [pid:%(process)d] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                },
                "json": {
                    "()": JsonFormatter,
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                },
            },
            "handlers": {
                "stream": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": formatter,
                }
            },
            "root": {"level": level, "handlers": ["stream"]},
            "loggers": {
                # uvicorn and the drivers stay at INFO even in dev
                "uvicorn": {"level": "INFO", "handlers": [], "propagate": True},
                "uvicorn.access": {"level": "INFO", "handlers": [], "propagate": True},
                "pymongo": {"level": "INFO", "handlers": [], "propagate": True},
                "botocore": {"level": "INFO", "handlers": [], "propagate": True},
                "passlib": {"level": "ERROR", "handlers": [], "propagate": True},
            },
        }
    )
