"""
Best-effort side-effect dispatch.

A state change is committed first; the notifications it triggers are emitted
afterwards and their failures are logged, never propagated.
"""
import logging

from django.db import transaction

logger = logging.getLogger(__name__)


def dispatch_safely(func, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except Exception:
        logger.exception("Notification dispatch failed in %s", getattr(func, '__qualname__', func))
        return None


def dispatch_on_commit(func, *args, **kwargs):
    """Run ``func`` once the surrounding transaction commits."""
    transaction.on_commit(lambda: dispatch_safely(func, *args, **kwargs))
