"""Structured logging configuration"""

import logging
import sys
import structlog
from pythonjsonlogger import jsonlogger


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging with JSON output

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper())
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance (name is typically __name__)"""
    return structlog.get_logger(name)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter for stdlib loggers (uvicorn, celery)"""

    def __init__(self, *args, environment: str = "production", **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        log_record['service'] = 'marketplace-recommendations'
        log_record['environment'] = self.environment
        log_record['logger_name'] = record.name

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)


def configure_stdlib_logging(logger_names=("uvicorn.access", "uvicorn.error"), environment: str = "production"):
    """Route the named stdlib loggers through the JSON formatter"""

    formatter = CustomJsonFormatter(
        '%(timestamp)s %(level)s %(name)s %(message)s',
        timestamp=True,
        environment=environment
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    for name in logger_names:
        logging.getLogger(name).handlers = [handler]
