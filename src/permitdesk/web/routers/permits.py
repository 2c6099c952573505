from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import RedirectResponse, Response

from permitdesk.core.modules.certificate.models import PermitPdf
from permitdesk.core.modules.permit.models import PermitPublicView, SubmissionResult
from permitdesk.core.modules.submission.models import SubmissionForm, UploadedDocument
from permitdesk.web.deps import AppDep, ConfigDep
from permitdesk.web.openapi import ErrorResponse

router = APIRouter(tags=["permits"])


@router.post(
    "/permits",
    summary="Submit permit application",
    description=(
        "Submit applicant data with a passport photo and an ID document as multipart form data. "
        "Returns the confirmation code and database id of the stored permit."
    ),
    operation_id="submitPermit",
    responses={
        200: {"description": "Application stored"},
        400: {"model": ErrorResponse, "description": "Missing fields, missing files or unacceptable documents"},
        500: {"model": ErrorResponse, "description": "Upload, rendering or database failure"},
    },
)
async def submit_permit(  # noqa: PLR0913
    app: AppDep,
    config: ConfigDep,
    first_name: Annotated[str | None, Form(alias="firstName")] = None,
    last_name: Annotated[str | None, Form(alias="lastName")] = None,
    email: Annotated[str | None, Form()] = None,
    phone: Annotated[str | None, Form()] = None,
    country: Annotated[str | None, Form()] = None,
    address: Annotated[str | None, Form()] = None,
    visit_purpose: Annotated[str | None, Form(alias="visitPurpose")] = None,
    visit_duration: Annotated[str | None, Form(alias="visitDuration")] = None,
    passport_photo: Annotated[UploadFile | None, File(alias="passportPhoto")] = None,
    id_document: Annotated[UploadFile | None, File(alias="idDocument")] = None,
) -> SubmissionResult:
    form = SubmissionForm(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        country=country,
        address=address,
        visit_purpose=visit_purpose,
        visit_duration=visit_duration,
        passport_photo=await read_document(passport_photo, config.max_photo_size),
        id_document=await read_document(id_document, config.max_id_document_size),
    )
    return await app.submit_permit(form)


@router.get(
    "/permits/{key}",
    summary="Get permit by confirmation code",
    description="Get the applicant-facing permit record. Document URLs are not included.",
    operation_id="getPermit",
    responses={
        200: {"description": "Permit found"},
        404: {"model": ErrorResponse, "description": "Permit not found"},
    },
)
async def get_permit(key: str, app: AppDep) -> PermitPublicView:
    return await app.get_public_permit(key)


@router.get(
    "/permits/{key}/pdf",
    summary="Download permit certificate",
    description="Download the permit certificate PDF by confirmation code or numeric id.",
    operation_id="downloadPermitPdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Permit certificate"},
        404: {"model": ErrorResponse, "description": "Permit not found"},
    },
)
async def download_permit_pdf(key: str, app: AppDep) -> Response:
    return pdf_response(await app.get_permit_pdf(key))


async def read_document(upload: UploadFile | None, max_size: int) -> UploadedDocument | None:
    """Read an uploaded part, stopping one byte past max_size so oversized files are never fully loaded."""
    if upload is None:
        return None
    content = await upload.read(max_size + 1)
    return UploadedDocument(filename=upload.filename, content=content, content_type=upload.content_type)


def pdf_response(pdf: PermitPdf) -> Response:
    if pdf.redirect_url is not None:
        return RedirectResponse(pdf.redirect_url)
    return Response(
        content=pdf.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf.filename}"'},
    )
