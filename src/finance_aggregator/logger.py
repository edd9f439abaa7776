"""Logging configuration."""

import logging
import logging.config
import os
from typing import Optional


def get_logging_config(level: Optional[str] = None) -> dict:
    log_level_name = (level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    log_dir = os.getenv("LOG_DIR")
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "default",
        },
    }
    root_handlers = ["console"]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": os.path.join(log_dir, "finance_aggregator.log"),
            "formatter": "default",
        }
        root_handlers.append("file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": root_handlers,
                "level": log_level_name,
            },
            "httpx": {
                "handlers": root_handlers,
                "level": "WARNING",
                "propagate": False,
            },
        },
    }


def setup_logging(level: Optional[str] = None) -> None:
    logging.config.dictConfig(get_logging_config(level))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
