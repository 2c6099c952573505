"""Confirmation codes, validity windows and blob naming for permits."""

import re
from datetime import datetime, timedelta
from uuid import uuid4

CONFIRMATION_ID_LENGTH = 8
DEFAULT_VISIT_DURATION_DAYS = 7
MAX_VISIT_DURATION_DAYS = 365
VALIDITY_OFFSET = timedelta(days=1)
DEFAULT_FILE_EXTENSION = "jpg"

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")
_NUMERIC_KEY_RE = re.compile(r"\d+")
_EXTENSION_UNSAFE_RE = re.compile(r"[^A-Za-z0-9]")
_MAX_DB_ID = 2**31 - 1


def generate_confirmation_id() -> str:
    """First 8 hex characters of a random UUID, upper-cased.

    Not checked against existing rows; collisions are accepted as unlikely.
    """
    return uuid4().hex[:CONFIRMATION_ID_LENGTH].upper()


def parse_visit_duration(value: str | None) -> int:
    """Parse the leading integer of a duration string; missing, invalid or non-positive values give 7."""
    if not value:
        return DEFAULT_VISIT_DURATION_DAYS
    match = _LEADING_INT_RE.match(value)
    if match is None:
        return DEFAULT_VISIT_DURATION_DAYS
    days = int(match.group(1))
    return days if days > 0 else DEFAULT_VISIT_DURATION_DAYS


def compute_validity(submitted_at: datetime, visit_duration: str | None) -> tuple[datetime, datetime]:
    """Return (valid_from, valid_until): one day after submission, plus the visit duration."""
    valid_from = submitted_at + VALIDITY_OFFSET
    valid_until = valid_from + timedelta(days=parse_visit_duration(visit_duration))
    return valid_from, valid_until


def parse_numeric_key(key: str) -> int | None:
    """Return the database id a lookup key refers to, or None if it is not a numeric id."""
    if not _NUMERIC_KEY_RE.fullmatch(key):
        return None
    value = int(key)
    if value > _MAX_DB_ID:
        return None
    return value


def file_extension(filename: str | None, default: str = DEFAULT_FILE_EXTENSION) -> str:
    """Extension of an uploaded filename, stripped of anything but letters and digits."""
    if not filename or "." not in filename:
        return default
    ext = _EXTENSION_UNSAFE_RE.sub("", filename.rsplit(".", 1)[1])
    return ext or default


def passport_photo_key(confirmation_id: str, filename: str | None) -> str:
    return f"{confirmation_id}-passport-photo.{file_extension(filename)}"


def id_document_key(confirmation_id: str, filename: str | None) -> str:
    return f"{confirmation_id}-id-document.{file_extension(filename)}"


def permit_pdf_key(confirmation_id: str) -> str:
    return f"{confirmation_id}-permit.pdf"


def pdf_download_filename(confirmation_id: str) -> str:
    return f"permit-{confirmation_id}.pdf"
