from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from permitdesk.core.modules.session.models import SESSION_COOKIE_NAME


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="permitdesk API",
            version="0.1.0",
            summary="Protected area permit applications, certificates and admin review",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "AdminSessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": SESSION_COOKIE_NAME,
                "description": "Signed admin session issued by POST /admin/login",
            },
        }

        # Only admin endpoints need the session; login itself is public
        for path, path_item in openapi_schema["paths"].items():
            for operation in path_item.values():
                if path.startswith("/admin/") and path != "/admin/login":
                    operation["security"] = [{"AdminSessionCookie": []}]
                else:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"error": "Missing required fields", "type": "validation_error"},
                {"error": "Session expired", "type": "authentication_error"},
                {"error": "Permit not found", "type": "not_found"},
            ]
        }
    }
