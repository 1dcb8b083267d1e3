"""HTTP middleware for the plugin backend.

- CORSHeaderMiddleware: every response may be read from any origin.
- AccessLogMiddleware: one Common Log Format line per request, enabled at
  trace level.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from logging_view_plugin.logger import TRACE


class CORSHeaderMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, logger: logging.Logger):
        super().__init__(app)
        self.logger = logger

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        self.logger.log(TRACE, format_access_line(request, response))
        return response


def format_access_line(request: Request, response: Response, now: float | None = None) -> str:
    """Render a request as a Common Log Format line."""
    host = request.client.host if request.client else "-"
    timestamp = time.strftime("%d/%b/%Y:%H:%M:%S %z", time.localtime(now))
    target = request.url.path
    if request.url.query:
        target += "?" + request.url.query
    protocol = f"HTTP/{request.scope.get('http_version', '1.1')}"
    size = response.headers.get("content-length", "-")
    return (
        f'{host} - - [{timestamp}] "{request.method} {target} {protocol}" '
        f"{response.status_code} {size}"
    )
