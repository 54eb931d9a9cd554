from typing import Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamps hardening headers on every response except CORS preflights."""

    def __init__(self, app, headers: Optional[Dict[str, str]] = None):
        super().__init__(app)
        self.headers = dict(headers or DEFAULT_SECURITY_HEADERS)

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        if request.method == "OPTIONS":
            return response
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
