from pydantic import BaseModel, Field


class PermitPdf(BaseModel):
    """A certificate ready to send: either rendered bytes or the URL of the stored copy."""

    filename: str = Field(..., description="Download filename, permit-{confirmationId}.pdf")
    content: bytes | None = None
    redirect_url: str | None = None
