from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, cast

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from permitdesk.config import Config
from permitdesk.core.db import create_engine, ensure_schema

if TYPE_CHECKING:
    from permitdesk.core.modules.certificate.service import CertificateService
    from permitdesk.core.modules.permit.service import PermitService
    from permitdesk.core.modules.session.service import SessionService
    from permitdesk.core.modules.storage.service import StorageService
    from permitdesk.core.modules.submission.service import SubmissionService

logger = structlog.get_logger(__name__)


class Service:
    """Base class for services with direct database access."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    permit: PermitService
    storage: StorageService
    certificate: CertificateService
    session: SessionService
    submission: SubmissionService

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []
        self._engine = engine

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for startup - the permits table must exist before anything else runs
        service_configs = [
            ("permit", "permitdesk.core.modules.permit.service", "PermitService"),
            ("storage", "permitdesk.core.modules.storage.service", "StorageService"),
            ("certificate", "permitdesk.core.modules.certificate.service", "CertificateService"),
            ("session", "permitdesk.core.modules.session.service", "SessionService"),
            ("submission", "permitdesk.core.modules.submission.service", "SubmissionService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(engine)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def replace(self, attr_name: str, service: Service) -> None:
        """Swap a registered service for another implementation (used by tests)."""
        current = getattr(self, attr_name)
        self._services[self._services.index(current)] = service
        setattr(self, attr_name, service)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop all services in reverse order."""
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, the database pool, and all service instances."""

    config: Config
    engine: AsyncEngine
    services: Services

    def __init__(self, config: Config) -> None:
        """Initialize core with config, the pooled engine, and auto-register services."""
        self.config = config
        self.engine = create_engine(config.database_url, config.db_pool_size, config.db_pool_timeout)
        self.services = Services(self.engine)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Ensure schema and start all services on application startup."""
        await ensure_schema(self.engine)
        await self.services.start_all()
        logger.info("Core started")

    async def on_stop(self) -> None:
        """Stop services and drain the connection pool on shutdown."""
        await self.services.stop_all()
        await self.engine.dispose()
        logger.info("Core stopped, connection pool disposed")
