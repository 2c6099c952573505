"""Uvicorn server runner for permitdesk."""

import structlog
import uvicorn
from sqlalchemy.engine import make_url
from uvicorn.config import LOGGING_CONFIG

from permitdesk.app import App
from permitdesk.config import Config
from permitdesk.web.server import create_fastapi_app

logger = structlog.get_logger(__name__)


def run_server(app: App, config: Config) -> None:
    """Run the API behind uvicorn.

    Forwarded headers are trusted from ``config.forwarded_allow_ips`` so that
    requests arriving through a TLS-terminating proxy keep their https scheme.
    """
    fastapi_app = create_fastapi_app(app, config)

    log_config = LOGGING_CONFIG.copy()
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"

    logger.info(
        "Starting permitdesk",
        host=config.host,
        port=config.port,
        database=make_url(config.database_url).render_as_string(hide_password=True),
        secure_cookies=config.secure_cookies,
    )
    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=log_config,
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips=config.forwarded_allow_ips,
    )
