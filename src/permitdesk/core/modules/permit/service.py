import time
from collections.abc import Sequence

import structlog
from sqlalchemy import Executable, RowMapping, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from permitdesk.core.core import Service
from permitdesk.core.db import permits
from permitdesk.core.modules.permit.models import NewPermit, Permit, PermitPublicView, PermitSummary
from permitdesk.core.modules.permit.utils import CONFIRMATION_ID_LENGTH, parse_numeric_key
from permitdesk.errors import NotFoundError, UpstreamError

logger = structlog.get_logger(__name__)

PUBLIC_COLUMNS = (
    permits.c.id,
    permits.c.confirmation_id,
    permits.c.first_name,
    permits.c.last_name,
    permits.c.email,
    permits.c.country,
    permits.c.created_at,
    permits.c.valid_from,
    permits.c.valid_until,
)

SUMMARY_COLUMNS = (
    permits.c.id,
    permits.c.confirmation_id,
    permits.c.first_name,
    permits.c.last_name,
    permits.c.email,
    permits.c.country,
    permits.c.created_at,
    permits.c.passport_photo_url,
)


class PermitService(Service):
    """Reads and writes permit rows. Rows are never updated or deleted."""

    def __init__(self, engine: AsyncEngine) -> None:
        super().__init__(engine)
        self._table = permits

    async def insert(self, new_permit: NewPermit) -> int:
        """Insert one permit row and return its generated id."""
        stmt = insert(self._table).values(**new_permit.to_row())
        start = time.perf_counter()
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
        except SQLAlchemyError as e:
            logger.warning("Permit insert failed", confirmation_id=new_permit.confirmation_id, error=str(e))
            raise UpstreamError("Database error while saving permit") from e

        permit_id = int(result.inserted_primary_key[0])  # type: ignore[index]
        logger.debug(
            "Inserted permit",
            permit_id=permit_id,
            confirmation_id=new_permit.confirmation_id,
            duration_ms=_elapsed_ms(start),
        )
        return permit_id

    async def find_by_id_or_confirmation(self, key: str) -> Permit | None:
        """Find a full permit by numeric id, or by confirmation code for any other key.

        An all-digit key that matches no id is retried as a confirmation code,
        since confirmation codes can consist of digits only.
        """
        permit_id = parse_numeric_key(key)
        if permit_id is not None:
            rows = await self._fetch(select(self._table).where(self._table.c.id == permit_id))
            if rows:
                return Permit.model_validate(dict(rows[0]))
            if len(key) != CONFIRMATION_ID_LENGTH:
                return None

        rows = await self._fetch(
            select(self._table).where(self._table.c.confirmation_id == key).order_by(self._table.c.id).limit(1)
        )
        return Permit.model_validate(dict(rows[0])) if rows else None

    async def find_by_confirmation(self, confirmation_id: str) -> PermitPublicView | None:
        """Find the public view of a permit by its confirmation code."""
        rows = await self._fetch(
            select(*PUBLIC_COLUMNS)
            .where(self._table.c.confirmation_id == confirmation_id)
            .order_by(self._table.c.id)
            .limit(1)
        )
        return PermitPublicView.model_validate(dict(rows[0])) if rows else None

    async def list_permits(self) -> list[PermitSummary]:
        """List all permits, newest first."""
        rows = await self._fetch(
            select(*SUMMARY_COLUMNS).order_by(self._table.c.created_at.desc(), self._table.c.id.desc())
        )
        return [PermitSummary.model_validate(dict(row)) for row in rows]

    async def get_permit(self, key: str) -> Permit:
        """Get a full permit by id or confirmation code.

        Raises:
            NotFoundError: If no permit matches the key
        """
        permit = await self.find_by_id_or_confirmation(key)
        if permit is None:
            raise NotFoundError
        return permit

    async def get_public_permit(self, confirmation_id: str) -> PermitPublicView:
        """Get the public view of a permit by confirmation code.

        Raises:
            NotFoundError: If no permit has this confirmation code
        """
        permit = await self.find_by_confirmation(confirmation_id)
        if permit is None:
            raise NotFoundError
        return permit

    async def _fetch(self, stmt: Executable) -> Sequence[RowMapping]:
        start = time.perf_counter()
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.warning("Permit query failed", error=str(e))
            raise UpstreamError("Database error while reading permits") from e
        logger.debug("Executed query", table="permits", rows=len(rows), duration_ms=_elapsed_ms(start))
        return rows


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
