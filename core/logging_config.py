import logging
import logging.config
import os
import time

_configured = False

_DEFAULT_FMT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_TRUTHY = {"1", "true", "yes"}


class UTCFormatter(logging.Formatter):
    converter = time.gmtime


def build_logging_config(env=None) -> dict:
    """
    Build the dictConfig used by setup_logging from environment variables.

    Environment Variables:
        LOG_LEVEL: Root logger level (default: "INFO").
        LOG_LEVEL_WERKZEUG: Level for Flask's request logger (default: "WARNING").
        LOG_FORMAT: Record format (default: "time | level | logger | message").
        LOG_USE_UTC: If "1"/"true"/"yes", timestamps are UTC (default: enabled).
        LOG_FILE: Optional path; adds a rotating file handler.
    """
    env = os.environ if env is None else env
    level = env.get("LOG_LEVEL", "INFO").upper()
    werkzeug_level = env.get("LOG_LEVEL_WERKZEUG", "WARNING").upper()
    use_utc = env.get("LOG_USE_UTC", "1").lower() in _TRUTHY
    log_file = env.get("LOG_FILE")

    formatter = {
        "()": UTCFormatter if use_utc else "logging.Formatter",
        "format": env.get("LOG_FORMAT", _DEFAULT_FMT),
        "datefmt": "%Y-%m-%dT%H:%M:%S",
    }
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "default",
            "stream": "ext://sys.stderr",
        }
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "default",
            "filename": log_file,
            "maxBytes": 2 * 1024 * 1024,
            "backupCount": 2,
        }
    names = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": handlers,
        "loggers": {
            "": {"level": level, "handlers": names, "propagate": False},
            "werkzeug": {"level": werkzeug_level, "handlers": names, "propagate": False},
        },
    }


def setup_logging() -> None:
    """Configure application-wide logging once; later calls are no-ops."""
    global _configured
    if _configured:
        return
    logging.config.dictConfig(build_logging_config())
    _configured = True
