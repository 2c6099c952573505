"""Tests for permit utility functions."""

import re
from datetime import UTC, datetime, timedelta

import pytest

from permitdesk.core.modules.permit.utils import (
    compute_validity,
    file_extension,
    generate_confirmation_id,
    id_document_key,
    parse_numeric_key,
    parse_visit_duration,
    passport_photo_key,
    pdf_download_filename,
    permit_pdf_key,
)


class TestGenerateConfirmationId:
    """Tests for confirmation code generation."""

    def test_format(self):
        """Test that codes are 8 upper-case alphanumeric characters."""
        for _ in range(200):
            code = generate_confirmation_id()
            assert re.fullmatch(r"[0-9A-F]{8}", code)

    def test_codes_differ(self):
        """Test that consecutive codes are not repeated."""
        assert len({generate_confirmation_id() for _ in range(50)}) > 1


class TestParseVisitDuration:
    """Tests for visit duration parsing."""

    @pytest.mark.parametrize(("value", "expected"), [("5", 5), ("14", 14), (" 3", 3), ("10 days", 10), ("1", 1)])
    def test_numeric_values(self, value, expected):
        """Test that the leading integer is used."""
        assert parse_visit_duration(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "days 5", "0", "-3", "   "])
    def test_fallback_to_seven(self, value):
        """Test that missing, non-numeric and non-positive durations give 7 days."""
        assert parse_visit_duration(value) == 7


class TestComputeValidity:
    """Tests for the validity window."""

    def test_starts_one_day_after_submission(self):
        """Test that validity starts one day after submission."""
        submitted = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)
        valid_from, _ = compute_validity(submitted, "5")
        assert valid_from == submitted + timedelta(days=1)

    def test_duration_added_to_start(self):
        """Test that validity ends duration days after it starts."""
        submitted = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)
        valid_from, valid_until = compute_validity(submitted, "5")
        assert valid_until - valid_from == timedelta(days=5)
        assert valid_until - submitted == timedelta(days=6)

    @pytest.mark.parametrize("value", [None, "", "soon", "0", "-1"])
    def test_default_window_is_seven_days(self, value):
        """Test that invalid durations produce a seven day window."""
        valid_from, valid_until = compute_validity(datetime(2026, 3, 1, tzinfo=UTC), value)
        assert valid_until - valid_from == timedelta(days=7)
        assert valid_until > valid_from


class TestParseNumericKey:
    """Tests for deciding between id and confirmation code lookups."""

    def test_digits_are_ids(self):
        """Test that all-digit keys are treated as ids."""
        assert parse_numeric_key("42") == 42
        assert parse_numeric_key("0") == 0

    @pytest.mark.parametrize("key", ["A1B2C3D4", "DOESNOTEXIST", "", "-1", "1.5", "12 ", "1e3"])
    def test_other_keys_are_codes(self, key):
        """Test that anything but plain digits is not an id."""
        assert parse_numeric_key(key) is None

    def test_out_of_range_is_not_an_id(self):
        """Test that numbers beyond the integer column range are not ids."""
        assert parse_numeric_key("99999999999") is None


class TestBlobNames:
    """Tests for blob keys and download names."""

    def test_extension_preserved(self):
        """Test that the original extension is kept."""
        assert passport_photo_key("ABCD1234", "selfie.PNG") == "ABCD1234-passport-photo.PNG"
        assert id_document_key("ABCD1234", "scan.final.pdf") == "ABCD1234-id-document.pdf"

    def test_missing_extension_defaults_to_jpg(self):
        """Test that files without an extension are stored as jpg."""
        assert file_extension("photo") == "jpg"
        assert file_extension(None) == "jpg"
        assert file_extension("trailing.") == "jpg"

    def test_extension_sanitized(self):
        """Test that path characters cannot leak into the key."""
        assert file_extension("evil.p/n\\g") == "png"

    def test_pdf_names(self):
        """Test permit PDF blob key and download filename."""
        assert permit_pdf_key("ABCD1234") == "ABCD1234-permit.pdf"
        assert pdf_download_filename("ABCD1234") == "permit-ABCD1234.pdf"
