"""Logging configuration with structured JSON output for production."""

import logging
import logging.config
import sys
from datetime import datetime, UTC
from pathlib import Path
from typing import Dict, Optional

from pythonjsonlogger import jsonlogger

from catalog import __version__

SERVICE_NAME = "instrument-catalog"


class StructuredFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps service metadata and request context."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(UTC).isoformat()
        log_record['service'] = SERVICE_NAME
        log_record['version'] = __version__

        for field in ('request_id', 'duration', 'status_code'):
            if hasattr(record, field):
                log_record[field] = getattr(record, field)


# (threshold seconds, level, message prefix), slowest first.
SLOW_REQUEST_LEVELS = (
    (5.0, logging.ERROR, "Very slow request"),
    (2.0, logging.WARNING, "Slow request"),
    (1.0, logging.INFO, "Request"),
)


def request_log_level(duration: float):
    for threshold, level, prefix in SLOW_REQUEST_LEVELS:
        if duration > threshold:
            return level, prefix
    return logging.DEBUG, "Request"


class PerformanceLogger:
    """Writes one timing line per request to the performance logger."""

    def __init__(self, logger_name: str = "performance"):
        self.logger = logging.getLogger(logger_name)

    def log_request(self, method: str, path: str, status_code: int, duration: float,
                    request_id: Optional[str] = None, **extra_fields):
        level, prefix = request_log_level(duration)
        self.logger.log(
            level,
            f"{prefix}: {method} {path} -> {status_code} in {duration:.2f}s",
            extra={
                'event_type': 'request',
                'method': method,
                'path': path,
                'status_code': status_code,
                'duration': duration,
                'request_id': request_id,
                **extra_fields,
            },
        )


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_json_logging: bool = False
) -> Dict[str, object]:
    """Apply the logging configuration and return the named loggers."""

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'json': {
                '()': StructuredFormatter,
                'format': '%(asctime)s %(name)s %(levelname)s %(message)s'
            }
        },
        'handlers': {
            'console': {
                'level': log_level,
                'class': 'logging.StreamHandler',
                'stream': sys.stdout,
                'formatter': 'json' if enable_json_logging else 'standard'
            }
        },
        'loggers': {
            '': {
                'handlers': ['console'],
                'level': log_level,
                'propagate': False
            },
            'uvicorn': {
                'handlers': ['console'],
                'level': 'INFO',
                'propagate': False
            },
            'sqlalchemy': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False
            },
            'performance': {
                'handlers': ['console'],
                'level': 'DEBUG' if log_level == 'DEBUG' else 'INFO',
                'propagate': False
            },
        }
    }

    if log_file:
        config['handlers']['file'] = {
            'level': log_level,
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': log_file,
            'maxBytes': 10 * 1024 * 1024,
            'backupCount': 5,
            'formatter': 'json' if enable_json_logging else 'standard'
        }
        for logger_config in config['loggers'].values():
            logger_config['handlers'].append('file')

    logging.config.dictConfig(config)

    return {
        'performance': PerformanceLogger(),
        'main': logging.getLogger('catalog'),
    }


def configure_from_settings(settings) -> Dict[str, object]:
    """Configure logging for the given settings object."""
    return setup_logging(
        log_level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
        log_file=settings.LOG_FILE,
        enable_json_logging=settings.is_production,
    )
