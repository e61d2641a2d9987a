"""
Reporting aggregates.
"""
import datetime

from django.test import TestCase
from django.utils import timezone

from apps.offboarding.models import OffboardingProcess
from apps.offboarding.services import OffboardingAnalyticsService
from apps.offboarding.services.analytics import _month_start
from .factories import ActiveProcessFactory, ChecklistItemFactory


class DepartmentStatsTests(TestCase):

    def test_rates_per_department(self):
        process = ActiveProcessFactory()
        ChecklistItemFactory(process=process, department='IT', is_completed=True)
        ChecklistItemFactory(process=process, department='IT', due_date=datetime.date(2020, 1, 1))
        ChecklistItemFactory(process=process, department='Payroll', is_completed=True)

        stats = {row['department']: row for row in OffboardingAnalyticsService.departments()}

        self.assertEqual(stats['IT']['total'], 2)
        self.assertEqual(stats['IT']['pending'], 1)
        self.assertEqual(stats['IT']['overdue'], 1)
        self.assertEqual(stats['IT']['completion_rate'], 50.0)
        self.assertEqual(stats['Payroll']['completion_rate'], 100.0)


class TrendTests(TestCase):

    def test_month_start_wraps_years(self):
        self.assertEqual(_month_start(datetime.date(2026, 2, 14), 3), datetime.date(2025, 11, 1))
        self.assertEqual(_month_start(datetime.date(2026, 2, 14), 0), datetime.date(2026, 2, 1))

    def test_started_and_closed_this_month(self):
        ActiveProcessFactory()
        ActiveProcessFactory(
            status=OffboardingProcess.STATUS_CLOSED, is_closed=True, closed_at=timezone.now(),
        )

        trend = OffboardingAnalyticsService.trends(months=3)

        self.assertEqual(len(trend), 3)
        current = trend[-1]
        self.assertEqual(current['month'], timezone.localdate().strftime('%Y-%m'))
        self.assertEqual(current['started'], 2)
        self.assertEqual(current['closed'], 1)
        self.assertEqual(trend[0]['started'], 0)
