"""
HTTP middleware: response security headers and error-response logging.
"""
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging

from services.security import security_config, SecurityUtils

logger = logging.getLogger(__name__)

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to all responses.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.security_headers = {
            # Prevent MIME type sniffing
            "X-Content-Type-Options": "nosniff",

            # Prevent clickjacking
            "X-Frame-Options": "DENY",

            "Referrer-Policy": "strict-origin-when-cross-origin",
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if security_config.enable_security_headers:
            for header, value in self.security_headers.items():
                response.headers[header] = value

            # Remove server header to avoid version disclosure
            if "Server" in response.headers:
                del response.headers["Server"]

        return response

class SecurityLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every error response with timing and reports processing time.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        process_time = round(time.time() - start_time, 3)

        if response.status_code >= 400:
            SecurityUtils.log_security_event(
                "http_error_response",
                {
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "process_time": process_time,
                    "user_agent": request.headers.get("user-agent", "")
                },
                client_ip=SecurityUtils.get_client_ip(request)
            )

        response.headers["X-Process-Time"] = str(process_time)
        return response
