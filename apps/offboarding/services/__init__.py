"""Offboarding service layer"""
from .analytics import OffboardingAnalyticsService
from .checklist import ChecklistService
from .directory import DepartmentDirectory
from .documents import DocumentService
from .generation import TaskGenerationService
from .lifecycle import ProcessLifecycleService
from .notifier import OffboardingNotifier
from .outcome import Outcome
from .reminders import ReminderSweep
from .templates import TemplateService

__all__ = [
    'ChecklistService',
    'DepartmentDirectory',
    'DocumentService',
    'OffboardingAnalyticsService',
    'OffboardingNotifier',
    'Outcome',
    'ProcessLifecycleService',
    'ReminderSweep',
    'TaskGenerationService',
    'TemplateService',
]
