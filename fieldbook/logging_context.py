"""Request ID logging context for tracing a reschedule across its steps.

``RescheduleSaga.execute`` sets ``RESCHEDULE-<booking id>`` before it
starts. Every record logged in that async context, by the saga or by the
booking store it drives, then carries ``request_id``, and ``load_config``
renders it as ``[%(request_id)s]`` in the root handler's format.

Usage:
    from fieldbook.logging_context import get_request_logger, set_request_id

    set_request_id("RESCHEDULE-42")
    logger = get_request_logger(__name__)
    logger.info("Creating replacement booking")
"""

import logging
from contextvars import ContextVar

NO_REQUEST_ID = "-"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Stamps ``request_id`` onto records that do not already carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def attach_request_id_filter(target: logging.Logger) -> None:
    """Add a RequestIdFilter to every handler of ``target``.

    Handler filters see records from all child loggers, including ones that
    never called ``get_request_logger``, so the format string can always
    reference ``%(request_id)s``.
    """
    for handler in target.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger whose records carry ``request_id`` wherever they are handled."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
