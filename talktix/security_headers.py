"""
Response hardening for the JSON API

Every response outside the excluded paths gets a fixed set of headers;
HSTS is only sent when running in production behind TLS.
"""

import logging
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .config import IS_PRODUCTION

logger = logging.getLogger(__name__)

HSTS_VALUE = "max-age=31536000; includeSubDomains"

DISABLED_BROWSER_FEATURES = ("accelerometer", "camera", "geolocation", "microphone", "payment", "usb")


def build_security_headers(hsts: bool) -> dict[str, str]:
    headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": ", ".join(f"{feature}=()" for feature in DISABLED_BROWSER_FEATURES),
    }
    if hsts:
        headers["Strict-Transport-Security"] = HSTS_VALUE
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp the security headers onto each outgoing response"""

    def __init__(self, app, exclude_paths: Optional[list[str]] = None, hsts: bool = IS_PRODUCTION):
        super().__init__(app)
        self.exclude_paths = tuple(exclude_paths or ())
        self.headers = build_security_headers(hsts)
        logger.debug(f"🔒 Security headers: {sorted(self.headers)}")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        # Swagger UI loads its own assets and frames
        if request.url.path.startswith(self.exclude_paths):
            return response

        response.headers.update(self.headers)
        return response
