import structlog

from permitdesk.core.core import Service
from permitdesk.core.modules.permit.models import NewPermit, SubmissionResult
from permitdesk.core.modules.permit.utils import (
    DEFAULT_VISIT_DURATION_DAYS,
    compute_validity,
    generate_confirmation_id,
    id_document_key,
    passport_photo_key,
    permit_pdf_key,
)
from permitdesk.core.modules.submission.models import SubmissionForm, UploadedDocument
from permitdesk.core.modules.submission.validators import validate_submission
from permitdesk.errors import ServiceError
from permitdesk.utils import now

logger = structlog.get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class SubmissionService(Service):
    """Runs one permit application from form data to a stored row.

    Steps run strictly in order; the first failure aborts the submission.
    A row is inserted only after both documents and the certificate are uploaded.
    """

    async def submit(self, form: SubmissionForm) -> SubmissionResult:
        """Validate, upload documents, render and upload the certificate, then store the permit.

        Raises:
            ValidationError: Missing or unacceptable fields or documents (nothing is uploaded)
            UpstreamError: Object store or database failure
            RenderError: Certificate generation failure
        """
        config = self.core.config
        validate_submission(form, config.max_photo_size, config.max_id_document_size)
        passport_photo, id_document = _documents(form)

        confirmation_id = generate_confirmation_id()
        log = logger.bind(confirmation_id=confirmation_id)
        valid_from, valid_until = compute_validity(now(), form.visit_duration)
        log.info(
            "Processing permit submission",
            country=form.country,
            passport_photo=f"{passport_photo.filename} ({passport_photo.size} bytes)",
            id_document=f"{id_document.filename} ({id_document.size} bytes)",
        )

        uploaded: list[tuple[str, str]] = []
        try:
            passport_photo_url = await self._upload_document(
                config.photo_container, passport_photo_key(confirmation_id, passport_photo.filename), passport_photo, uploaded
            )
            id_document_url = await self._upload_document(
                config.id_container, id_document_key(confirmation_id, id_document.filename), id_document, uploaded
            )

            new_permit = NewPermit(
                confirmation_id=confirmation_id,
                first_name=form.first_name or "",
                last_name=form.last_name or "",
                email=form.email or "",
                phone=form.phone or "",
                country=form.country or "",
                address=form.address or "",
                visit_purpose=form.visit_purpose or "",
                visit_duration=form.visit_duration or str(DEFAULT_VISIT_DURATION_DAYS),
                valid_from=valid_from,
                valid_until=valid_until,
                passport_photo_url=passport_photo_url,
                id_document_url=id_document_url,
                pdf_url="",
            )
            pdf = await self.core.services.certificate.render_for_permit(new_permit)

            pdf_key = permit_pdf_key(confirmation_id)
            pdf_url = await self.core.services.storage.upload(config.permits_container, pdf_key, pdf, PDF_CONTENT_TYPE)
            uploaded.append((config.permits_container, pdf_key))

            new_permit = new_permit.model_copy(update={"pdf_url": pdf_url})
            permit_id = await self.core.services.permit.insert(new_permit)
        except Exception as e:
            log.warning("Permit submission aborted", error=str(e), uploaded_blobs=len(uploaded))
            if config.cleanup_failed_uploads:
                await self._discard_uploads(uploaded, log)
            raise

        log.info("Permit submission stored", permit_id=permit_id)
        return SubmissionResult(confirmation_id=confirmation_id, id=permit_id)

    async def _upload_document(
        self, container: str, key: str, document: UploadedDocument, uploaded: list[tuple[str, str]]
    ) -> str:
        url = await self.core.services.storage.upload(container, key, document.content, document.upload_content_type)
        uploaded.append((container, key))
        return url

    async def _discard_uploads(self, uploaded: list[tuple[str, str]], log: structlog.stdlib.BoundLogger) -> None:
        """Best-effort removal of blobs written by an aborted submission."""
        for container, key in uploaded:
            try:
                await self.core.services.storage.delete(container, key)
            except ServiceError as e:
                log.warning("Could not remove orphaned blob", container=container, key=key, error=str(e))


def _documents(form: SubmissionForm) -> tuple[UploadedDocument, UploadedDocument]:
    if form.passport_photo is None or form.id_document is None:
        raise RuntimeError("Documents must be validated before upload")
    return form.passport_photo, form.id_document
