"""Celery task delivering a rendered email"""
import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = logging.getLogger(__name__)


@shared_task(
    name='notifications.send_email',
    autoretry_for=(Exception,),
    retry_kwargs={"max_retries": 3, "countdown": 60},
    acks_late=True,
)
def send_email_task(subject, text, html, to_email):
    try:
        email = EmailMultiAlternatives(
            subject=subject,
            body=text,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[to_email],
        )
        email.attach_alternative(html, "text/html")
        email.send()

        logger.info("Email sent to %s with subject: %s", to_email, subject)

    except Exception:
        logger.exception("Email sending failed to %s", to_email)
        raise
