# emergicare/common/logging.py

import logging
import sys

import structlog
from pythonjsonlogger import jsonlogger

from emergicare.common.config import settings


def setup_logging() -> None:
    """Structured logging setup for the API process."""
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors = [
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if settings.LOG_JSON:
        # Event becomes the record message, bound keys become record extras
        processors.append(structlog.stdlib.render_to_log_kwargs)
        formatter = jsonlogger.JsonFormatter("%(message)s")
    else:
        processors.append(structlog.dev.ConsoleRenderer())
        formatter = logging.Formatter("%(levelname)-8s %(name)s: %(message)s")

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root.handlers = [handler]
    root.setLevel(level)

    # SQL echo is controlled by DEBUG, keep the engine logger quiet otherwise
    if not settings.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str):
    return structlog.get_logger(name)
