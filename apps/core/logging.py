"""
Correlation ids for log records.

A request, a Celery task run or one pass of the reminder sweep binds an id;
``CorrelationIdFilter`` copies it onto every record logged meanwhile.
"""
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


def new_correlation_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def bind_correlation_id(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind ``correlation_id`` (or a fresh one) for the duration of the block."""
    correlation_id = correlation_id or new_correlation_id()
    token = _correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id_var.reset(token)


class CorrelationIdFilter:
    def filter(self, record):
        record.correlation_id = get_correlation_id() or '-'
        return True
