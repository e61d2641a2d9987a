"""Templated email delivery"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable

from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


class EmailService:
    """
    Render ``emails/<kind>.txt`` / ``.html`` and queue the message.

    ``send`` never raises: a rendering or broker failure is logged and reported
    as ``False`` so the caller's state change is unaffected.
    """

    SUBJECTS = {
        'task_assigned': 'New Task - {employee_name}',
        'task_completed': 'Task Completed - {employee_name}',
        'task_overdue': 'OVERDUE: Task Reminder - {employee_name}',
        'process_completed': 'Offboarding Process Completed - {employee_name}',
        'process_update': '{title}',
    }

    @classmethod
    def send(cls, to: str, kind: str, params: Dict[str, Any]) -> bool:
        from apps.notifications.tasks import send_email_task

        if not to or '@' not in to:
            return False
        try:
            subject = cls.SUBJECTS[kind].format(**params)
            text = render_to_string(f"emails/{kind}.txt", params)
            html = render_to_string(f"emails/{kind}.html", params)
            send_email_task.delay(subject=subject, text=text, html=html, to_email=to)
        except Exception:
            logger.exception("Failed to send %s email to %s", kind, to)
            return False
        logger.info("Queued %s email to %s", kind, to)
        return True

    @classmethod
    def send_many(cls, recipients: Iterable[str], kind: str, params: Dict[str, Any]) -> int:
        sent = 0
        for address in dict.fromkeys(r.lower() for r in recipients if r):
            if cls.send(address, kind, params):
                sent += 1
        return sent
