from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog

from permitdesk.config import Config
from permitdesk.core.core import Core
from permitdesk.core.modules.certificate.models import PermitPdf
from permitdesk.core.modules.permit.models import Permit, PermitPublicView, PermitSummary, SubmissionResult
from permitdesk.core.modules.permit.utils import pdf_download_filename
from permitdesk.core.modules.session.models import AdminToken
from permitdesk.core.modules.submission.models import SubmissionForm
from permitdesk.errors import AuthenticationError

logger = structlog.get_logger(__name__)


class App:
    """Facade for all application operations, checks the admin session before delegating to Core."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @property
    def core(self) -> Core:
        return self._core

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Applicant operations ===
    async def submit_permit(self, form: SubmissionForm) -> SubmissionResult:
        """Run the submission pipeline for one application."""
        return await self._core.services.submission.submit(form)

    async def get_public_permit(self, confirmation_id: str) -> PermitPublicView:
        """Get the reduced permit record by confirmation code (public)."""
        return await self._core.services.permit.get_public_permit(confirmation_id)

    async def get_permit_pdf(self, key: str) -> PermitPdf:
        """Get the certificate for a permit by id or confirmation code (public)."""
        permit = await self._core.services.permit.get_permit(key)
        return await self._permit_pdf(permit)

    # === Admin session ===
    def login(self, username: str, password: str) -> AdminToken:
        """Check the admin credentials and issue a session token."""
        if not self._core.services.session.check_credentials(username, password):
            logger.info("Admin login rejected", username=username)
            raise AuthenticationError("Invalid credentials")
        return self._core.services.session.issue(username)

    def ensure_admin(self, token: str | None) -> str:
        """Return the admin username for a valid session token.

        Raises:
            AuthenticationError: Missing, invalid or expired token
        """
        check = self._core.services.session.verify(token)
        if not check.valid or check.username is None:
            raise AuthenticationError(check.reason or "Not authenticated", clear_cookie=check.clear_cookie)
        return check.username

    # === Admin operations ===
    async def list_permits(self, token: str | None) -> list[PermitSummary]:
        """List all permits, newest first (admin only)."""
        self.ensure_admin(token)
        return await self._core.services.permit.list_permits()

    async def get_permit(self, token: str | None, key: str) -> Permit:
        """Get the full permit record by id or confirmation code (admin only)."""
        self.ensure_admin(token)
        return await self._core.services.permit.get_permit(key)

    async def get_admin_permit_pdf(self, token: str | None, key: str) -> PermitPdf:
        """Get the certificate for a permit (admin only)."""
        self.ensure_admin(token)
        return await self.get_permit_pdf(key)

    async def _permit_pdf(self, permit: Permit) -> PermitPdf:
        filename = pdf_download_filename(permit.confirmation_id)
        if self._core.config.pdf_redirect_to_stored and permit.pdf_url:
            return PermitPdf(filename=filename, redirect_url=permit.pdf_url)
        content = await self._core.services.certificate.render_for_permit(permit)
        return PermitPdf(filename=filename, content=content)
