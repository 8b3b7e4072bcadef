import sys
from logging.config import dictConfig
from app.core.config import LOG_LEVEL

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# fields are supplied by request_logging_middleware through ``extra``
ACCESS_FORMAT = (
    "%(asctime)s | ACCESS | %(client_addr)s | %(store_name)s | "
    "%(method)s %(path)s | %(status_code)s | %(process_time_ms)sms"
)


def _console(formatter: str) -> dict:
    return {
        "class": "logging.StreamHandler",
        "stream": sys.stdout,
        "formatter": formatter,
    }


def setup_logging():
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": DEFAULT_FORMAT},
                "access": {"format": ACCESS_FORMAT},
            },
            "handlers": {
                "console": _console("default"),
                "access_console": _console("access"),
            },
            "loggers": {
                "access": {
                    "handlers": ["access_console"],
                    "level": "INFO",
                    "propagate": False,
                },
                # the access logger above already records every request
                "uvicorn.access": {"level": "WARNING"},
                # platform calls are logged by the client itself
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
                "sqlalchemy.engine": {"level": "WARNING"},
                "apscheduler": {"level": "INFO"},
            },
            "root": {
                "level": LOG_LEVEL,
                "handlers": ["console"],
            },
        }
    )
