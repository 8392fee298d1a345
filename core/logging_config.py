"""
Structlog logging configuration.

Every event carries the service name and environment; payment code binds
the payment and order identifiers for the duration of a provider call so
that provider and adapter logs can be joined back to the aggregate.
"""
import logging
import json
from contextlib import contextmanager
from typing import Any, Iterator, List, MutableMapping, Optional

import structlog
from structlog.processors import TimeStamper, add_log_level, JSONRenderer
from structlog.dev import ConsoleRenderer
from structlog.contextvars import bound_contextvars, merge_contextvars
from structlog.stdlib import ProcessorFormatter

from core.config import settings


def add_app_context(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Stamp service and environment unless the event already sets them."""
    event_dict.setdefault("service", settings.PROJECT_NAME)
    event_dict.setdefault("environment", settings.ENVIRONMENT)
    return event_dict


@contextmanager
def bind_checkout_context(payment: str, order: Optional[str] = None) -> Iterator[None]:
    """Bind payment/order identifiers to every log event emitted inside the block."""
    context = {"payment": payment}
    if order is not None:
        context["order"] = order
    with bound_contextvars(**context):
        yield


def get_renderer() -> Any:
    """Console in DEBUG, JSON otherwise.

    structlog passes default/sort_keys to the serializer, so it has to accept them.
    """
    if settings.DEBUG:
        return ConsoleRenderer(colors=True)

    def _dumps(obj, default=None, **kwargs):
        return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)
    return JSONRenderer(serializer=_dumps)


def resolve_level() -> int:
    if settings.DEBUG:
        return logging.DEBUG
    return getattr(logging, settings.LOG_LEVEL.upper())


def configure_logging() -> None:
    """Configure structlog and bridge stdlib logging into the same chain."""
    shared_pre_chain: List[Any] = [
        merge_contextvars,
        add_log_level,
        add_app_context,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_pre_chain,
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = ProcessorFormatter(
        foreign_pre_chain=shared_pre_chain,
        processors=[
            ProcessorFormatter.remove_processors_meta,
            get_renderer(),
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level())
    # httpx logs every request at INFO; provider calls are logged here already
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger."""
    return structlog.get_logger(name)


configure_logging()
