from pydantic import BaseModel

DEFAULT_CONTENT_TYPE = "image/jpeg"


class UploadedDocument(BaseModel):
    """A file part of the submission form, read fully into memory."""

    filename: str | None = None
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def upload_content_type(self) -> str:
        """Declared content type, or JPEG when the client sent none."""
        return self.content_type or DEFAULT_CONTENT_TYPE


class SubmissionForm(BaseModel):
    """One permit application as received from the applicant."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    country: str | None = None
    address: str | None = None
    visit_purpose: str | None = None
    visit_duration: str | None = None
    passport_photo: UploadedDocument | None = None
    id_document: UploadedDocument | None = None
