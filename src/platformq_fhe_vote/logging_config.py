import logging
import logging.config
from typing import Optional

from .config import get_settings


def setup_structured_logging(level: Optional[str] = None):
    """
    Configures Python's logging to output logs in a structured JSON format,
    so workflow diagnostics can be shipped to a log aggregator as key-value records.
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "class": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
            }
        },
        "handlers": {
            "json": {
                "class": "logging.StreamHandler",
                "formatter": "json"
            }
        },
        "root": {
            "handlers": ["json"],
            "level": level or get_settings().log_level
        }
    }
    logging.config.dictConfig(config)
