"""
File Upload Validators

Validates uploaded files with:
  1. Extension whitelist
  2. Maximum file size enforcement
  3. Magic-bytes verification

Usage in serializers:
    from apps.core.upload_validators import validate_upload

    class MySerializer(serializers.Serializer):
        file = serializers.FileField(validators=[validate_upload])
"""

import logging
import os

from django.conf import settings
from django.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_EXTENSIONS = (".pdf", ".doc", ".docx", ".jpg", ".jpeg", ".png", ".txt")

# Magic bytes -> extensions allowed to carry them
_MAGIC_BYTES = {
    b"%PDF": {".pdf"},
    b"\x89PNG": {".png"},
    b"\xff\xd8\xff": {".jpg", ".jpeg"},
    b"PK": {".docx"},
    b"\xd0\xcf\x11": {".doc"},
}


def max_upload_bytes():
    return getattr(settings, "MAX_UPLOAD_SIZE_MB", 10) * 1024 * 1024


def allowed_extensions():
    return tuple(getattr(settings, "ALLOWED_UPLOAD_EXTENSIONS", DEFAULT_ALLOWED_EXTENSIONS))


def _check_magic_bytes(file_obj, ext):
    """
    Files whose header matches a known signature must carry a matching
    extension. Unrecognized headers (plain text) pass.
    """
    file_obj.seek(0)
    header = file_obj.read(8)
    file_obj.seek(0)

    if not header:
        return False

    for magic, extensions in _MAGIC_BYTES.items():
        if header.startswith(magic):
            return ext in extensions
    return True


def validate_upload(file_obj):
    """
    Central file-upload validator.

    Raises ``ValidationError`` on:
      - Empty or oversized file
      - Disallowed extension
      - Magic-byte / extension mismatch
    """
    size = getattr(file_obj, "size", None)
    if not size:
        raise ValidationError("Please select a file to upload.")

    limit = max_upload_bytes()
    if size > limit:
        raise ValidationError(
            f"File too large. Maximum allowed size is {limit // (1024 * 1024)} MB."
        )

    name = getattr(file_obj, "name", "") or ""
    ext = os.path.splitext(name)[1].lower()
    allowed = allowed_extensions()
    if ext not in allowed:
        raise ValidationError(
            f"File type '{ext or name}' is not allowed. Allowed types: {', '.join(allowed)}"
        )

    if hasattr(file_obj, "read") and not _check_magic_bytes(file_obj, ext):
        logger.warning("upload_magic_byte_mismatch file=%s ext=%s", name, ext)
        raise ValidationError("File content does not match its declared type.")

    return file_obj
