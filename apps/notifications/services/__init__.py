"""Notification service layer"""
from .dispatch import dispatch_on_commit, dispatch_safely
from .email_service import EmailService
from .notification_service import NotificationService

__all__ = [
    'EmailService',
    'NotificationService',
    'dispatch_on_commit',
    'dispatch_safely',
]
