import logging
from logging.config import dictConfig


def configure_logging(level: str = "INFO") -> None:
    """
    Console logging for the API, the CLI and tests.

    Applied from create_app so `flask` commands and the WSGI server share it.
    """
    level = (level or "INFO").upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "root": {"level": level, "handlers": ["console"]},
        }
    )
    logging.getLogger(__name__).debug("Logging configured at %s", level)
