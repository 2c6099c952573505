from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, populated from snake_case row columns."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Permit(CamelModel):
    """Full permit record, as stored in the permits table."""

    id: int
    confirmation_id: str
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    country: str
    address: str = ""
    visit_purpose: str = ""
    visit_duration: str = ""
    created_at: datetime | None = None
    valid_from: datetime
    valid_until: datetime
    passport_photo_url: str
    id_document_url: str
    pdf_url: str = ""


class PermitPublicView(CamelModel):
    """Reduced record shown to the applicant (no document URLs)."""

    id: int
    confirmation_id: str
    first_name: str
    last_name: str
    email: str
    country: str
    created_at: datetime | None = None
    valid_from: datetime
    valid_until: datetime


class PermitSummary(CamelModel):
    """Admin list item."""

    id: int
    confirmation_id: str
    first_name: str
    last_name: str
    email: str
    country: str
    created_at: datetime | None = None
    passport_photo_url: str


class NewPermit(BaseModel):
    """Values written by the submission pipeline; id and created_at are assigned by the database."""

    confirmation_id: str
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    country: str
    address: str = ""
    visit_purpose: str = ""
    visit_duration: str = "7"
    valid_from: datetime
    valid_until: datetime
    passport_photo_url: str
    id_document_url: str
    pdf_url: str

    def to_row(self) -> dict[str, Any]:
        return self.model_dump()


class CertificateData(BaseModel):
    """Everything the certificate renderer prints."""

    confirmation_id: str
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    country: str
    address: str = ""
    visit_purpose: str = ""
    visit_duration: str = ""
    valid_from: datetime
    valid_until: datetime

    @classmethod
    def from_permit(cls, permit: Permit | NewPermit) -> Self:
        return cls.model_validate(permit.model_dump(include=set(cls.model_fields)))


class SubmissionResult(CamelModel):
    """Response to a successful submission."""

    success: bool = True
    confirmation_id: str = Field(..., description="8-character confirmation code shown to the applicant")
    id: int = Field(..., description="Database id of the stored permit")
