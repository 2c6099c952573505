import secrets

import structlog
from itsdangerous import BadData, URLSafeSerializer
from pydantic import ValidationError as PydanticValidationError

from permitdesk.core.core import Service
from permitdesk.core.modules.session.models import SESSION_TTL_SECONDS, AdminSession, AdminToken, SessionCheck
from permitdesk.utils import now_ms

logger = structlog.get_logger(__name__)

TOKEN_SALT = "permitdesk.admin-session"


class SessionService(Service):
    """Issues and verifies signed, self-contained admin session tokens."""

    @property
    def _serializer(self) -> URLSafeSerializer:
        return URLSafeSerializer(self.core.config.session_secret_key, salt=TOKEN_SALT)

    def check_credentials(self, username: str, password: str) -> bool:
        """Compare against the configured admin account in constant time."""
        config = self.core.config
        username_ok = secrets.compare_digest(username.encode(), config.admin_username.encode())
        password_ok = secrets.compare_digest(password.encode(), config.admin_password.encode())
        return username_ok and password_ok

    def issue(self, username: str) -> AdminToken:
        """Create a token for username that expires in 24 hours."""
        session = AdminSession(username=username, exp=now_ms() + SESSION_TTL_SECONDS * 1000)
        logger.info("Admin session issued", username=username)
        return self.encode(session)

    def encode(self, session: AdminSession) -> AdminToken:
        return AdminToken(self._serializer.dumps(session.model_dump()))

    def verify(self, token: str | None) -> SessionCheck:
        """Check a token's signature and expiry."""
        if not token:
            return SessionCheck(valid=False, reason="Not authenticated")

        try:
            session = AdminSession.model_validate(self._serializer.loads(token))
        except (BadData, PydanticValidationError):
            logger.info("Rejected invalid admin session token")
            return SessionCheck(valid=False, clear_cookie=True, reason="Invalid session")

        if session.exp < now_ms():
            logger.info("Rejected expired admin session", username=session.username)
            return SessionCheck(valid=False, clear_cookie=True, reason="Session expired")

        return SessionCheck(valid=True, username=session.username)
