"""Relational schema and connection pool for the permits store."""

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text, func
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

metadata = MetaData()

permits = Table(
    "permits",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("confirmation_id", String(8), nullable=False, index=True),
    Column("first_name", Text, nullable=False),
    Column("last_name", Text, nullable=False),
    Column("email", Text, nullable=False),
    Column("phone", Text, nullable=False, server_default=""),
    Column("country", Text, nullable=False),
    Column("address", Text, nullable=False, server_default=""),
    Column("visit_purpose", Text, nullable=False, server_default=""),
    Column("visit_duration", Text, nullable=False, server_default="7"),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now(), index=True),
    Column("valid_from", DateTime(timezone=True), nullable=False),
    Column("valid_until", DateTime(timezone=True), nullable=False),
    Column("passport_photo_url", Text, nullable=False),
    Column("id_document_url", Text, nullable=False),
    Column("pdf_url", Text, nullable=False),
)


def create_engine(database_url: str, pool_size: int = 10, pool_timeout: float = 10.0) -> AsyncEngine:
    """Create the process-wide pooled engine. Owned and disposed by Core."""
    if database_url.startswith("sqlite"):
        # SQLite uses a single-file pool; sizing options do not apply
        return create_async_engine(database_url)
    return create_async_engine(
        database_url,
        pool_size=pool_size,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
        pool_recycle=300,
    )


async def ensure_schema(engine: AsyncEngine) -> None:
    """Create the permits table if it does not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
