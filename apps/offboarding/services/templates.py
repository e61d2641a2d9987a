"""Task template maintenance and CSV exchange"""
from __future__ import annotations

import csv
import io
import logging
from typing import Any, Dict, Iterable

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.offboarding.models import Department, TaskTemplate

logger = logging.getLogger(__name__)

CSV_HEADER = [
    'TaskName', 'Department', 'Description', 'DaysFromLastWorkingDay', 'IsRequired', 'IsActive', 'DependsOn',
]
TRUE_VALUES = {'true', '1', 'yes', 'y'}


def _as_bool(value, default=True):
    value = (value or '').strip().lower()
    if not value:
        return default
    return value in TRUE_VALUES


class TemplateService:
    """Create, edit, retire and exchange task templates."""

    @staticmethod
    @transaction.atomic
    def create(*, actor, data: Dict[str, Any]) -> TaskTemplate:
        template = TaskTemplate(created_by=actor.identifier, **data)
        template.full_clean()
        template.save()
        logger.info("Template %s (%s) created by %s", template.pk, template.task_name, actor.identifier)
        return template

    @staticmethod
    @transaction.atomic
    def update(template: TaskTemplate, data: Dict[str, Any]) -> TaskTemplate:
        for field, value in data.items():
            setattr(template, field, value)
        # clean() rejects dependency edges that would close a cycle
        template.full_clean()
        template.save()
        return template

    @staticmethod
    def deactivate(template: TaskTemplate) -> TaskTemplate:
        template.is_active = False
        template.save(update_fields=['is_active', 'updated_at'])
        logger.info("Template %s deactivated", template.pk)
        return template

    @staticmethod
    @transaction.atomic
    def delete(template: TaskTemplate) -> None:
        dependents = template.dependent_templates.count()
        if dependents:
            raise ValidationError(f"Cannot delete template: {dependents} other template(s) depend on it.")
        template.delete()

    @staticmethod
    def delete_department(department: Department) -> None:
        owned = TaskTemplate.objects.filter(department__iexact=department.name, is_active=True).count()
        if owned:
            raise ValidationError(
                f"Cannot delete department: {owned} active template(s) are assigned to it."
            )
        department.delete()

    # ------------------------------------------------------------------- CSV
    @staticmethod
    def export_csv(templates: Iterable[TaskTemplate]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(CSV_HEADER)
        for template in templates:
            writer.writerow([
                template.task_name,
                template.department,
                template.description,
                template.days_from_last_working_day,
                template.is_required,
                template.is_active,
                template.depends_on_template.task_name if template.depends_on_template_id else '',
            ])
        return buffer.getvalue()

    @staticmethod
    @transaction.atomic
    def import_csv(content: str, *, actor) -> Dict[str, Any]:
        """
        Upsert templates keyed by (task name, department).

        Dependencies are resolved by task name in a second pass, once every row
        is in place. Rows with errors are reported and skipped.
        """
        reader = csv.DictReader(io.StringIO(content.lstrip('\ufeff')))
        missing = [column for column in ('TaskName', 'Department') if column not in (reader.fieldnames or [])]
        if missing:
            raise ValidationError(f"CSV is missing required column(s): {', '.join(missing)}")

        result = {'created': 0, 'updated': 0, 'skipped': 0, 'errors': []}
        pending_links = []
        for line_no, row in enumerate(reader, start=2):
            name = (row.get('TaskName') or '').strip()
            department = (row.get('Department') or '').strip()
            if not name or not department:
                result['skipped'] += 1
                result['errors'].append(f"Row {line_no}: TaskName and Department are required.")
                continue
            try:
                offset = int((row.get('DaysFromLastWorkingDay') or '0').strip() or 0)
            except ValueError:
                result['skipped'] += 1
                result['errors'].append(f"Row {line_no}: DaysFromLastWorkingDay must be a whole number.")
                continue

            template = TaskTemplate.objects.filter(task_name__iexact=name, department__iexact=department).first()
            created = template is None
            if created:
                template = TaskTemplate(task_name=name, department=department, created_by=actor.identifier)
            template.description = (row.get('Description') or '').strip()[:1000]
            template.days_from_last_working_day = offset
            template.is_required = _as_bool(row.get('IsRequired'))
            template.is_active = _as_bool(row.get('IsActive'))
            template.save()
            result['created' if created else 'updated'] += 1

            parent_name = (row.get('DependsOn') or '').strip()
            if parent_name:
                pending_links.append((line_no, template, parent_name))

        for line_no, template, parent_name in pending_links:
            parent = (
                TaskTemplate.objects.filter(task_name__iexact=parent_name)
                .exclude(pk=template.pk)
                .order_by('-is_active', 'pk')
                .first()
            )
            if parent is None:
                result['errors'].append(f"Row {line_no}: dependency '{parent_name}' not found.")
                continue
            template.depends_on_template = parent
            try:
                template.full_clean()
            except ValidationError as exc:
                template.depends_on_template = None
                result['errors'].append(f"Row {line_no}: {'; '.join(exc.messages)}")
                continue
            template.save(update_fields=['depends_on_template', 'updated_at'])

        logger.info(
            "Template import by %s: %s created, %s updated, %s skipped",
            actor.identifier, result['created'], result['updated'], result['skipped'],
        )
        return result
