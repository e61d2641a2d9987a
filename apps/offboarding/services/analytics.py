"""Offboarding reporting aggregates"""
from __future__ import annotations

from datetime import date

from django.db.models import Count, Q
from django.db.models.functions import TruncMonth
from django.utils import timezone

from apps.offboarding.models import ChecklistItem, OffboardingProcess


def _month_start(day: date, months_back: int) -> date:
    month_index = day.year * 12 + day.month - 1 - months_back
    return date(month_index // 12, month_index % 12 + 1, 1)


class OffboardingAnalyticsService:

    @staticmethod
    def overview():
        processes = OffboardingProcess.objects.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(status=OffboardingProcess.STATUS_ACTIVE, is_closed=False)),
            completed=Count('id', filter=Q(is_closed=True)),
            pending=Count('id', filter=Q(status=OffboardingProcess.STATUS_PENDING_APPROVAL)),
            rejected=Count('id', filter=Q(status=OffboardingProcess.STATUS_REJECTED)),
        )

        progress = OffboardingProcess.objects.filter(
            status__in=[OffboardingProcess.STATUS_ACTIVE, OffboardingProcess.STATUS_CLOSED]
        ).annotate(
            total_items=Count('items'),
            done_items=Count('items', filter=Q(items__is_completed=True)),
        ).values_list('total_items', 'done_items')
        percents = [done / total * 100 for total, done in progress if total]
        processes['average_progress'] = round(sum(percents) / len(percents), 1) if percents else 0.0

        today = timezone.localdate()
        processes['overdue_tasks'] = ChecklistItem.objects.filter(
            is_completed=False,
            due_date__lt=today,
            process__is_closed=False,
            process__status=OffboardingProcess.STATUS_ACTIVE,
        ).count()
        return processes

    @staticmethod
    def departments():
        today = timezone.localdate()
        rows = (
            ChecklistItem.objects.values('department')
            .annotate(
                total=Count('id'),
                completed=Count('id', filter=Q(is_completed=True)),
                overdue=Count('id', filter=Q(is_completed=False, due_date__lt=today)),
            )
            .order_by('department')
        )
        stats = []
        for row in rows:
            total = row['total']
            stats.append({
                'department': row['department'],
                'total': total,
                'completed': row['completed'],
                'pending': total - row['completed'],
                'overdue': row['overdue'],
                'completion_rate': round(row['completed'] / total * 100, 1) if total else 0.0,
            })
        return stats

    @staticmethod
    def trends(months: int = 6):
        """Processes started and closed per month, oldest month first."""
        today = timezone.localdate()
        first = _month_start(today, months - 1)

        started = dict(
            OffboardingProcess.objects.filter(process_start_date__gte=first)
            .annotate(month=TruncMonth('process_start_date'))
            .values('month')
            .annotate(count=Count('id'))
            .values_list('month', 'count')
        )
        closed = {}
        for closed_at in OffboardingProcess.objects.filter(
            is_closed=True, closed_at__isnull=False,
        ).values_list('closed_at', flat=True):
            day = timezone.localdate(closed_at)
            if day >= first:
                key = day.replace(day=1)
                closed[key] = closed.get(key, 0) + 1

        trend = []
        for offset in range(months - 1, -1, -1):
            month = _month_start(today, offset)
            trend.append({
                'month': month.strftime('%Y-%m'),
                'label': month.strftime('%b %Y'),
                'started': started.get(month, 0),
                'closed': closed.get(month, 0),
            })
        return trend
