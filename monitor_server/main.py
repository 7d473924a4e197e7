import logging
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from monitor_server.api import status
from monitor_server.config import Settings, get_settings
from monitor_server.logging_config import configure_logging
from monitor_server.security.auth import BasicAuthMiddleware
from monitor_server.security.htpasswd import CredentialStore, load_htpasswd
from monitor_server.services.status_aggregator import format_size

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[CredentialStore] = None,
) -> FastAPI:
    """
    Build the application.

    The credential store is loaded before the app exists; if the htpasswd file
    cannot be read, ConfigError propagates and nothing is served.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_file)

    if store is None:
        store = load_htpasswd(settings.htpasswd_path)

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["format_size"] = format_size

    app = FastAPI(title="Monitor Server")
    app.state.settings = settings
    app.state.credentials = store
    app.state.templates = templates

    app.add_middleware(BasicAuthMiddleware, store=store)
    app.include_router(status.router, prefix="/status", tags=["status"])

    logger.info("Monitor server configured with %d user(s)", len(store))
    return app


def run() -> None:
    settings = get_settings()
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.server_address,
        port=settings.server_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
