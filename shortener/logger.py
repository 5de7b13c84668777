"""Logging setup for the URL shortener.

One named logger, ``shortener``, configured once at startup. Module loggers
(``shortener.storage`` and friends) propagate into it.

==========  ===========================  =======
APP_ENV     Format                       Level
==========  ===========================  =======
local       text, one line per record    DEBUG
dev         JSON, one object per line    DEBUG
prod        JSON, one object per line    INFO
==========  ===========================  =======
"""

import json
import logging
import sys

from shortener.enums import AppEnv

__all__ = ["LOGGER_NAME", "JSONFormatter", "setup_logger", "get_logger"]

LOGGER_NAME = "shortener"

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object on a single line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class _RequestIdDefault(logging.Filter):
    """Give records logged outside a request an empty request_id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def setup_logger(env: AppEnv | str = AppEnv.LOCAL) -> logging.Logger:
    env = AppEnv(env)
    level = logging.INFO if env is AppEnv.PROD else logging.DEBUG

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(TEXT_FORMAT) if env is AppEnv.LOCAL else JSONFormatter())
    handler.addFilter(_RequestIdDefault())
    logger.addHandler(handler)
    logger.propagate = False

    logger.debug(f"Logger configured for env={env.value}")
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)
