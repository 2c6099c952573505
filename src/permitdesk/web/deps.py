from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie

from permitdesk.app import App
from permitdesk.config import Config
from permitdesk.core.modules.session.models import SESSION_COOKIE_NAME

# Security scheme
session_cookie_scheme = APIKeyCookie(name=SESSION_COOKIE_NAME, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_config(request: Request) -> Config:
    return cast(Config, request.app.state.config)


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
ConfigDep = Annotated[Config, Depends(get_config)]
SessionTokenDep = Annotated[str | None, Depends(session_cookie_scheme)]
