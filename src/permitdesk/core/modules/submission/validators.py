"""Validation of permit submissions before any external call is made."""

from collections.abc import Callable

from permitdesk.core.modules.permit.utils import MAX_VISIT_DURATION_DAYS, file_extension, parse_visit_duration
from permitdesk.core.modules.submission.models import SubmissionForm, UploadedDocument
from permitdesk.errors import ValidationError

REQUIRED_TEXT_FIELDS = ("first_name", "last_name", "email", "country")

PHOTO_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "heic", "heif", "bmp"})
ID_DOCUMENT_TYPES = frozenset({"application/pdf", "image/jpeg", "image/jpg", "image/png"})
ID_DOCUMENT_EXTENSIONS = frozenset({"pdf", "jpg", "jpeg", "png"})
GENERIC_CONTENT_TYPE = "application/octet-stream"


def validate_submission(form: SubmissionForm, max_photo_size: int, max_id_document_size: int) -> None:
    """Raise ValidationError if required fields or documents are missing or unacceptable."""
    if any(not (getattr(form, name) or "").strip() for name in REQUIRED_TEXT_FIELDS):
        raise ValidationError("Missing required fields")

    if parse_visit_duration(form.visit_duration) > MAX_VISIT_DURATION_DAYS:
        raise ValidationError(f"Visit duration must not exceed {MAX_VISIT_DURATION_DAYS} days")

    if not has_document(form.passport_photo) or not has_document(form.id_document):
        raise ValidationError("Missing passport photo or ID document")

    validate_passport_photo(form.passport_photo, max_photo_size)  # type: ignore[arg-type]
    validate_id_document(form.id_document, max_id_document_size)  # type: ignore[arg-type]


def has_document(document: UploadedDocument | None) -> bool:
    return document is not None and document.size > 0


def validate_passport_photo(document: UploadedDocument, max_size: int) -> None:
    if document.size > max_size:
        raise ValidationError(f"Passport photo exceeds the limit of {_megabytes(max_size)}")
    if not _type_accepted(document, lambda ct: ct.startswith("image/"), PHOTO_EXTENSIONS):
        raise ValidationError("Passport photo must be an image")


def validate_id_document(document: UploadedDocument, max_size: int) -> None:
    if document.size > max_size:
        raise ValidationError(f"ID document exceeds the limit of {_megabytes(max_size)}")
    if not _type_accepted(document, ID_DOCUMENT_TYPES.__contains__, ID_DOCUMENT_EXTENSIONS):
        raise ValidationError("ID document must be a PDF, JPEG or PNG file")


def _type_accepted(document: UploadedDocument, accepts: Callable[[str], bool], extensions: frozenset[str]) -> bool:
    """Check the declared content type, falling back to the extension for generic binary uploads.

    A part without a content type is accepted and stored as JPEG.
    """
    content_type = (document.content_type or "").lower()
    if not content_type:
        return True
    if content_type == GENERIC_CONTENT_TYPE:
        return file_extension(document.filename, default="").lower() in extensions
    return accepts(content_type)


def _megabytes(size: int) -> str:
    return f"{size / (1024 * 1024):.0f} MB"
