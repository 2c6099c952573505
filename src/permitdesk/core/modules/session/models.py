"""Admin session models."""

from typing import NewType

from pydantic import BaseModel, Field

AdminToken = NewType("AdminToken", str)

SESSION_COOKIE_NAME = "admin_session"
SESSION_TTL_SECONDS = 24 * 60 * 60


class AdminSession(BaseModel):
    """Claims carried inside the session cookie. The server keeps no session table."""

    username: str
    exp: int = Field(..., description="Absolute expiry as epoch milliseconds")


class SessionCheck(BaseModel):
    """Outcome of verifying a session token."""

    valid: bool
    username: str | None = None
    clear_cookie: bool = False  # The caller should delete the session cookie
    reason: str | None = None
