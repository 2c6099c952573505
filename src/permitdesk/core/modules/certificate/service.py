import asyncio

import structlog

from permitdesk.core.core import Service
from permitdesk.core.modules.certificate.renderer import render_permit_pdf
from permitdesk.core.modules.permit.models import CertificateData, NewPermit, Permit

logger = structlog.get_logger(__name__)


class CertificateService(Service):
    """Renders permit certificates off the event loop."""

    async def render(self, data: CertificateData) -> bytes:
        """Render a certificate PDF.

        Raises:
            RenderError: If the PDF cannot be generated
        """
        pdf = await asyncio.to_thread(render_permit_pdf, data)
        logger.debug("Rendered certificate", confirmation_id=data.confirmation_id, size=len(pdf))
        return pdf

    async def render_for_permit(self, permit: Permit | NewPermit) -> bytes:
        return await self.render(CertificateData.from_permit(permit))
