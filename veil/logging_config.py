"""
Logging configuration for the Veil client.

Provides structured logging for production use.
"""

import copy
import logging
import logging.config
from typing import Optional


LOGGER_NAME = "veil"

DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "redact_credentials": {
            "()": "veil.utils.structured_logging.CredentialRedactionFilter"
        }
    },
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "detailed": {
            "format": (
                "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d "
                "- %(message)s (%(funcName)s)"
            ),
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "standard",
            "filters": ["redact_credentials"],
            "stream": "ext://sys.stdout"
        }
    },
    "loggers": {
        LOGGER_NAME: {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False
        }
    }
}

FILE_HANDLER_MAX_BYTES = 10485760  # 10MB


def _file_handler(filename: str, level: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filters": ["redact_credentials"],
        "filename": filename,
        "maxBytes": FILE_HANDLER_MAX_BYTES,
        "backupCount": 5
    }


def build_logging_config(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False
) -> dict:
    """
    Build a dictConfig mapping without applying it.

    Args:
        level: Log level for the "veil" logger
        log_file: Optional log file path (errors go to <name>_errors.log)
        json_format: Use JSON formatting

    Returns:
        Fresh config dict (the module default is never mutated)
    """
    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)
    logger_config = config["loggers"][LOGGER_NAME]

    if level:
        logger_config["level"] = level.upper()

    if log_file:
        if log_file.endswith(".log"):
            error_file = log_file[:-len(".log")] + "_errors.log"
        else:
            error_file = log_file + "_errors"
        config["handlers"]["file"] = _file_handler(log_file, "DEBUG")
        config["handlers"]["error_file"] = _file_handler(error_file, "ERROR")
        logger_config["handlers"] = ["console", "file", "error_file"]

    if json_format:
        for handler in config["handlers"].values():
            handler["formatter"] = "json"

    return config


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON formatting
    """
    logging.config.dictConfig(build_logging_config(level, log_file, json_format))


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance under the "veil" namespace.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
