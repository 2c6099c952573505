from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from permitdesk.app import App
from permitdesk.config import Config
from permitdesk.errors import ServiceError, UserError
from permitdesk.web.error_handlers import general_exception_handler, service_error_handler, user_error_handler
from permitdesk.web.openapi import set_custom_openapi
from permitdesk.web.routers import admin_router, permits_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="permitdesk API",
        lifespan=lifespan,
    )
    # Set before startup so the app is usable without running the lifespan
    app.state.app = app_instance
    app.state.config = config

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(permits_router)
    app.include_router(admin_router)

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
