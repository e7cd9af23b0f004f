import logging
import logging.config
from typing import Any, Dict, Optional

from .config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_log_config(level: Optional[str] = None, log_file: Optional[str] = None) -> Dict[str, Any]:
    """dictConfig shared by the app and uvicorn."""
    level = (level or settings.log_level).upper()
    log_file = settings.log_file if log_file is None else log_file

    handlers: Dict[str, Any] = {
        "console": {
            "formatter": "default",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        handlers["default"] = {
            "formatter": "default",
            "class": "logging.FileHandler",
            "filename": log_file,
            "mode": "a",
        }
    names = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": level, "handlers": names},
        "loggers": {
            "uvicorn": {"level": level, "handlers": names, "propagate": False},
            "uvicorn.access": {"level": level, "handlers": names, "propagate": False},
            "uvicorn.error": {"level": level, "handlers": names, "propagate": False},
        },
    }


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    logging.config.dictConfig(build_log_config(level, log_file))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
