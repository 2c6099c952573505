"""Tests for the submission pipeline."""

import re
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from permitdesk.app import App
from permitdesk.core.modules.submission.models import SubmissionForm
from permitdesk.errors import RenderError, UpstreamError, ValidationError


class TestSuccessfulSubmission:
    """Tests for the happy path."""

    async def test_returns_code_and_id(self, started_app: App, submission_form: SubmissionForm):
        """Test that a submission returns an 8-character code and the stored id."""
        result = await started_app.submit_permit(submission_form)

        assert result.success is True
        assert re.fullmatch(r"[0-9A-F]{8}", result.confirmation_id)
        permit = await started_app.core.services.permit.get_permit(str(result.id))
        assert permit.confirmation_id == result.confirmation_id

    async def test_uploads_three_blobs_in_order(self, started_app: App, storage, submission_form: SubmissionForm):
        """Test that photo, ID document and certificate are uploaded under derived keys."""
        result = await started_app.submit_permit(submission_form)
        cid = result.confirmation_id

        assert storage.uploads == [
            ("photo", f"{cid}-passport-photo.png"),
            ("idphoto", f"{cid}-id-document.pdf"),
            ("permits", f"{cid}-permit.pdf"),
        ]
        pdf, content_type = storage.blobs[("permits", f"{cid}-permit.pdf")]
        assert content_type == "application/pdf"
        assert pdf.startswith(b"%PDF")
        assert storage.blobs[("photo", f"{cid}-passport-photo.png")][1] == "image/png"

    async def test_stored_row_holds_all_urls(self, started_app: App, submission_form: SubmissionForm):
        """Test that the row references the three uploaded blobs."""
        result = await started_app.submit_permit(submission_form)
        permit = await started_app.core.services.permit.get_permit(result.confirmation_id)

        assert permit.passport_photo_url.endswith(f"/photo/{result.confirmation_id}-passport-photo.png")
        assert permit.id_document_url.endswith(f"/idphoto/{result.confirmation_id}-id-document.pdf")
        assert permit.pdf_url.endswith(f"/permits/{result.confirmation_id}-permit.pdf")
        assert permit.phone == "+977 1 4000000"
        assert permit.visit_duration == "5"

    async def test_validity_window(self, started_app: App, submission_form: SubmissionForm):
        """Test that validity starts one day after submission and lasts the visit duration."""
        before = datetime.now(UTC).replace(tzinfo=None)
        result = await started_app.submit_permit(submission_form)
        after = datetime.now(UTC).replace(tzinfo=None)

        permit = await started_app.core.services.permit.get_permit(result.confirmation_id)
        valid_from = permit.valid_from.replace(tzinfo=None)
        valid_until = permit.valid_until.replace(tzinfo=None)

        assert valid_until - valid_from == timedelta(days=5)
        assert before + timedelta(days=6) - timedelta(seconds=1) <= valid_until <= after + timedelta(days=6)

    async def test_optional_fields_defaulted(self, started_app: App, submission_form: SubmissionForm):
        """Test that absent optional fields are stored as empty strings and duration as 7."""
        form = submission_form.model_copy(update={"phone": None, "address": None, "visit_purpose": None, "visit_duration": None})
        result = await started_app.submit_permit(form)
        permit = await started_app.core.services.permit.get_permit(result.confirmation_id)

        assert (permit.phone, permit.address, permit.visit_purpose) == ("", "", "")
        assert permit.visit_duration == "7"
        assert permit.valid_until - permit.valid_from == timedelta(days=7)

    async def test_missing_content_type_uploaded_as_jpeg(self, started_app: App, storage, submission_form: SubmissionForm):
        """Test that a photo without declared type is stored as JPEG."""
        photo = submission_form.passport_photo.model_copy(update={"content_type": None, "filename": "photo"})
        result = await started_app.submit_permit(submission_form.model_copy(update={"passport_photo": photo}))
        key = ("photo", f"{result.confirmation_id}-passport-photo.jpg")
        assert storage.blobs[key][1] == "image/jpeg"


class TestRejectedSubmission:
    """Tests for submissions rejected before any external call."""

    async def test_missing_email_touches_nothing(
        self, started_app: App, storage, submission_form: SubmissionForm, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that a validation failure performs zero uploads and zero inserts."""
        insert = AsyncMock()
        monkeypatch.setattr(started_app.core.services.permit, "insert", insert)

        with pytest.raises(ValidationError):
            await started_app.submit_permit(submission_form.model_copy(update={"email": ""}))

        assert storage.uploads == []
        assert insert.await_count == 0


class TestFailedSubmission:
    """Tests for failures after uploads started."""

    async def test_insert_failure_keeps_uploads_by_default(
        self, started_app: App, storage, submission_form: SubmissionForm, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that a database failure after all uploads raises and leaves the blobs in place."""
        monkeypatch.setattr(
            started_app.core.services.permit, "insert", AsyncMock(side_effect=UpstreamError("Database error while saving permit"))
        )

        with pytest.raises(UpstreamError):
            await started_app.submit_permit(submission_form)

        assert len(storage.uploads) == 3
        assert storage.deletes == []
        assert len(storage.blobs) == 3

    async def test_upload_failure_stops_pipeline(self, started_app: App, storage, submission_form: SubmissionForm):
        """Test that a failed ID document upload stops before rendering or inserting."""
        storage.fail_containers.add("idphoto")

        with pytest.raises(UpstreamError):
            await started_app.submit_permit(submission_form)

        assert [container for container, _ in storage.uploads] == ["photo"]
        assert await started_app.core.services.permit.list_permits() == []

    async def test_render_failure_inserts_nothing(
        self, started_app: App, storage, submission_form: SubmissionForm, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that a render failure aborts the submission without a row."""
        monkeypatch.setattr(started_app.core.services.certificate, "render_for_permit", AsyncMock(side_effect=RenderError()))

        with pytest.raises(RenderError):
            await started_app.submit_permit(submission_form)

        assert len(storage.uploads) == 2
        assert await started_app.core.services.permit.list_permits() == []


class TestFailedSubmissionCleanup:
    """Tests for removing uploaded blobs when cleanup is switched on."""

    @pytest.fixture(autouse=True)
    def enable_cleanup(self, started_app: App, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(started_app.core.config, "cleanup_failed_uploads", True)

    async def test_insert_failure_removes_uploads(
        self, started_app: App, storage, submission_form: SubmissionForm, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that a database failure after all uploads removes the blobs."""
        monkeypatch.setattr(
            started_app.core.services.permit, "insert", AsyncMock(side_effect=UpstreamError("Database error while saving permit"))
        )

        with pytest.raises(UpstreamError):
            await started_app.submit_permit(submission_form)

        assert len(storage.uploads) == 3
        assert sorted(storage.deletes) == sorted(storage.uploads)
        assert storage.blobs == {}

    async def test_upload_failure_removes_earlier_upload(self, started_app: App, storage, submission_form: SubmissionForm):
        """Test that only the blobs written before the failure are removed."""
        storage.fail_containers.add("idphoto")

        with pytest.raises(UpstreamError):
            await started_app.submit_permit(submission_form)

        assert storage.deletes == storage.uploads

    async def test_cleanup_failure_keeps_original_error(
        self, started_app: App, storage, submission_form: SubmissionForm, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that a failing delete does not replace the original error."""
        monkeypatch.setattr(started_app.core.services.permit, "insert", AsyncMock(side_effect=UpstreamError("Database error")))
        monkeypatch.setattr(storage, "delete", AsyncMock(side_effect=UpstreamError("Failed to delete")))

        with pytest.raises(UpstreamError, match="Database error"):
            await started_app.submit_permit(submission_form)
