import logging

from fastapi import FastAPI

from logging_view_plugin.api.middleware import AccessLogMiddleware, CORSHeaderMiddleware
from logging_view_plugin.api.routes import build_router
from logging_view_plugin.api.static import PluginStaticFiles
from logging_view_plugin.config import Settings
from logging_view_plugin.logger import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def create_app(
    settings: Settings,
    log: logging.Logger | None = None,
    log_requests: bool = False,
) -> FastAPI:
    """Build the plugin backend application.

    The plugin configuration file is read here, once; restart the process to
    pick up changes to it.
    """
    log = log or logger

    app = FastAPI(
        title="Logging View Plugin",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(build_router(settings, log))

    # serve front end files
    app.mount("/", PluginStaticFiles(directory=settings.static_path), name="static")

    app.add_middleware(CORSHeaderMiddleware)
    if log_requests:
        app.add_middleware(AccessLogMiddleware, logger=log)

    return app
