"""Process document storage"""
from __future__ import annotations

import io
import logging
import os
import zipfile

from django.db import transaction

from apps.core.upload_validators import validate_upload
from apps.notifications.services import dispatch_on_commit
from apps.offboarding.models import OffboardingDocument, OffboardingProcess

logger = logging.getLogger(__name__)


class DocumentService:

    @staticmethod
    @transaction.atomic
    def upload(
        process: OffboardingProcess,
        uploaded_file,
        *,
        actor,
        document_type: str = OffboardingDocument.TYPE_OTHER,
        description: str = '',
    ) -> OffboardingDocument:
        """
        Validate and store a file against ``process``.

        Exit interviews, asset return forms and clearance certificates are
        required documents; uploading one marks it completed.
        """
        validate_upload(uploaded_file)
        required = document_type in OffboardingDocument.REQUIRED_TYPES
        document = OffboardingDocument(
            process=process,
            file_name=os.path.basename(uploaded_file.name),
            document_type=document_type,
            file_size=uploaded_file.size,
            content_type=getattr(uploaded_file, 'content_type', '') or '',
            description=(description or '')[:500],
            is_required=required,
            is_completed=required,
            uploaded_by=actor.identifier,
        )
        document.file.save(document.file_name, uploaded_file, save=False)
        document.save()
        logger.info(
            "Document %s (%s) uploaded to process %s by %s",
            document.pk, document.document_type, process.pk, actor.identifier,
        )
        return document

    @staticmethod
    def delete(document: OffboardingDocument, *, actor) -> None:
        name = document.file.name
        storage = document.file.storage
        with transaction.atomic():
            document.delete()
            if name:
                dispatch_on_commit(storage.delete, name)
        logger.info("Document %s deleted by %s", name, actor.identifier)

    @staticmethod
    def missing_required_types(process: OffboardingProcess):
        uploaded = set(
            process.documents.filter(document_type__in=OffboardingDocument.REQUIRED_TYPES)
            .values_list('document_type', flat=True)
        )
        return [doc_type for doc_type in OffboardingDocument.REQUIRED_TYPES if doc_type not in uploaded]

    @staticmethod
    def zip_all(process: OffboardingProcess) -> bytes:
        """Every stored document of ``process`` packed into one archive."""
        buffer = io.BytesIO()
        used_names = set()
        with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
            for document in process.documents.order_by('uploaded_at', 'pk'):
                if not document.file:
                    continue
                name = document.file_name
                if name in used_names:
                    stem, ext = os.path.splitext(name)
                    name = f"{stem}_{document.pk}{ext}"
                used_names.add(name)
                try:
                    with document.file.open('rb') as handle:
                        archive.writestr(name, handle.read())
                except FileNotFoundError:
                    logger.warning("Stored file for document %s is missing; left out of archive", document.pk)
        return buffer.getvalue()
