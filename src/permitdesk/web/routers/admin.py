from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from permitdesk.core.modules.permit.models import Permit, PermitSummary
from permitdesk.core.modules.session.models import SESSION_COOKIE_NAME, SESSION_TTL_SECONDS
from permitdesk.web.deps import AppDep, ConfigDep, SessionTokenDep
from permitdesk.web.openapi import ErrorResponse
from permitdesk.web.routers.permits import pdf_response

router = APIRouter(prefix="/admin", tags=["admin"])


class LoginRequest(BaseModel):
    """Admin login request. Missing fields are treated as wrong credentials."""

    username: str = Field("", description="Admin username")
    password: str = Field("", description="Admin password")


class SuccessResponse(BaseModel):
    success: bool = True


class AuthStatusResponse(BaseModel):
    authenticated: bool = True


@router.post(
    "/login",
    summary="Admin login",
    description="Check the admin credentials and set the session cookie (valid for 24 hours).",
    operation_id="adminLogin",
    responses={
        200: {"description": "Logged in, session cookie set"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, config: ConfigDep, response: Response) -> SuccessResponse:
    token = app.login(login_data.username, login_data.password)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="strict",
        secure=config.secure_cookies,
        path="/",
        max_age=SESSION_TTL_SECONDS,
    )
    return SuccessResponse()


@router.post(
    "/logout",
    summary="Admin logout",
    description="Clear the session cookie.",
    operation_id="adminLogout",
    responses={200: {"description": "Logged out"}},
)
async def logout(response: Response) -> SuccessResponse:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/", httponly=True, samesite="strict")
    return SuccessResponse()


@router.get(
    "/check-auth",
    summary="Check admin session",
    description="Succeeds while the session cookie is valid. Invalid or expired cookies are cleared.",
    operation_id="adminCheckAuth",
    responses={
        200: {"description": "Session is valid"},
        401: {"model": ErrorResponse, "description": "Missing, invalid or expired session"},
    },
)
async def check_auth(app: AppDep, token: SessionTokenDep) -> AuthStatusResponse:
    app.ensure_admin(token)
    return AuthStatusResponse()


@router.get(
    "/permits",
    summary="List permits",
    description="List all permits, newest first.",
    operation_id="adminListPermits",
    responses={
        200: {"description": "Permit list"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_permits(app: AppDep, token: SessionTokenDep) -> list[PermitSummary]:
    return await app.list_permits(token)


@router.get(
    "/permits/{key}",
    summary="Get permit details",
    description="Get the full permit record, including document URLs, by numeric id or confirmation code.",
    operation_id="adminGetPermit",
    responses={
        200: {"description": "Permit found"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Permit not found"},
    },
)
async def get_permit(key: str, app: AppDep, token: SessionTokenDep) -> Permit:
    return await app.get_permit(token, key)


@router.get(
    "/permits/{key}/pdf",
    summary="Download permit certificate",
    description="Download the permit certificate PDF by numeric id or confirmation code.",
    operation_id="adminDownloadPermitPdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Permit certificate"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Permit not found"},
    },
)
async def download_permit_pdf(key: str, app: AppDep, token: SessionTokenDep) -> Response:
    return pdf_response(await app.get_admin_permit_pdf(token, key))
