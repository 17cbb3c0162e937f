"""YesBot structured logging module.

Every record carries the deployment (``git_sha``) and, while an event is
being dispatched, the dispatch context bound with ``dispatch_context``.

Usage:

    from core.logging import dispatch_context, get_module_logger

    logger = get_module_logger()

    with dispatch_context(event_type="MESSAGE"):
        logger.info("handler_started", handler="PollReactions")
"""

import logging
import inspect
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, WrappedLogger

from .config import settings


def _is_test_environment() -> bool:
    """Detect if running in a test environment."""
    return "pytest" in sys.modules


def add_deployment_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag records with the deployed revision."""
    event_dict.setdefault("git_sha", settings.GIT_SHA)
    return event_dict


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> BoundLogger:
    """Configure structured logging for the bot.

    Development renders to the console, production emits one JSON object
    per line. Under pytest all output is suppressed.

    Args:
        log_level: Optional override for the log level. Defaults to
            settings.LOG_LEVEL.
        is_production: Optional override for production mode. Defaults to
            settings.is_production.

    Returns:
        Configured logger instance
    """
    if _is_test_environment():
        logging.root.setLevel(logging.CRITICAL + 1)

        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=logging.CRITICAL + 1,
            force=True,
        )
        return structlog.stdlib.get_logger()

    prod_mode = is_production if is_production is not None else settings.is_production

    processors = [
        structlog.contextvars.merge_contextvars,
        add_deployment_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if prod_mode:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    effective_log_level = log_level or settings.LOG_LEVEL
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, effective_log_level.upper(), logging.INFO),
    )

    return structlog.stdlib.get_logger()


logger: BoundLogger = configure_logging()


@contextmanager
def dispatch_context(**context: Any) -> Iterator[None]:
    """Bind context to every record logged while dispatching one event."""
    with structlog.contextvars.bound_contextvars(**context):
        yield


def get_module_logger() -> BoundLogger:
    """Get a logger for the calling module, bound to its dotted path."""
    current_frame = inspect.currentframe()
    if current_frame is None:
        return logger

    module = inspect.getmodule(current_frame.f_back)
    if module is None:
        return logger.bind(component="unknown")

    return logger.bind(
        component=module.__name__.rsplit(".", 1)[-1],
        module_path=module.__name__,
    )
