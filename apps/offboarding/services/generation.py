"""Checklist generation from task templates"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import List

from django.db import transaction

from apps.offboarding.models import ChecklistItem, OffboardingProcess, TaskTemplate

logger = logging.getLogger(__name__)


class TaskGenerationService:

    @staticmethod
    @transaction.atomic
    def generate(process: OffboardingProcess) -> List[ChecklistItem]:
        """
        Create one checklist item per active template and mirror the template
        dependency graph onto the new items.
        """
        templates = list(
            TaskTemplate.objects.filter(is_active=True).order_by('department', 'task_name')
        )
        if not templates:
            logger.info("No active templates; process %s has an empty checklist", process.pk)
            return []

        items = [
            ChecklistItem(
                process=process,
                template=template,
                task_name=template.task_name,
                department=template.department,
                description=template.description,
                is_required=template.is_required,
                due_date=process.last_working_day + timedelta(days=template.days_from_last_working_day),
            )
            for template in templates
        ]
        for item in items:
            item.save()

        item_by_template = {item.template_id: item for item in items}
        linked = []
        for template, item in zip(templates, items):
            parent = item_by_template.get(template.depends_on_template_id)
            if parent is None:
                # dependency missing or inactive
                continue
            item.depends_on_task = parent
            linked.append(item)
        if linked:
            ChecklistItem.objects.bulk_update(linked, ['depends_on_task'])

        logger.info(
            "Generated %s checklist items (%s dependency links) for process %s",
            len(items), len(linked), process.pk,
        )
        return items
