import logging
import logging.config
import os
from datetime import datetime
from modbase.core.config import settings

FORMATTERS = {
    "default": {
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
    "detailed": {
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s:%(lineno)d - %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
    "access": {
        "format": "%(asctime)s - %(levelname)s - %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
}


def _rotating_file(log_dir: str, kind: str, level: str, formatter: str) -> dict:
    """Daily-named rotating file under <log_dir>/<kind>/"""
    os.makedirs(os.path.join(log_dir, kind), exist_ok=True)
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": os.path.join(log_dir, kind, f"{kind}-{datetime.now():%Y-%m-%d}.log"),
        "maxBytes": 10 * 1024 * 1024,
        "backupCount": 10,
        "encoding": "utf-8",
    }


def build_logging_config(log_dir: str = None) -> dict:
    log_dir = log_dir or settings.LOG_DIR
    level = settings.LOG_LEVEL
    # every access check is logged at DEBUG
    access_level = "DEBUG" if settings.DEBUG else level

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG" if settings.DEBUG else level,
            "formatter": "default",
            "stream": "ext://sys.stdout",
        },
        "app_file": _rotating_file(log_dir, "app", level, "detailed"),
        "error_file": _rotating_file(log_dir, "error", "ERROR", "detailed"),
        "access_file": _rotating_file(log_dir, "access", "INFO", "access"),
    }

    loggers = {
        "": {"level": level, "handlers": ["console", "app_file", "error_file"], "propagate": False},
        "modbase.access": {"level": access_level, "handlers": ["console", "app_file", "error_file"], "propagate": False},
        "sqlalchemy.engine": {"level": "INFO" if settings.DATABASE_ECHO else "WARNING", "handlers": ["app_file"], "propagate": False},
    }
    for name in ("access", "uvicorn.access"):
        loggers[name] = {"level": "INFO", "handlers": ["access_file"], "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": FORMATTERS,
        "handlers": handlers,
        "loggers": loggers,
    }


def setup_logging():
    """Setup application logging configuration"""
    logging.config.dictConfig(build_logging_config())

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured: level={settings.LOG_LEVEL} dir={settings.LOG_DIR}")
