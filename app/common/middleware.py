"""
Middleware for handling multi-tenancy
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from uuid import UUID
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


class TenantMiddleware(BaseHTTPMiddleware):
    """
    Middleware that extracts tenant_id from the tenant header
    and sets it on request.state for use in endpoint handlers
    """

    # Paths that don't require tenant context
    EXEMPT_PREFIXES = [
        "/docs",
        "/redoc",
        "/openapi.json",
        "/health",
        "/subscriptions/plans",
        "/subscriptions/admin",
    ]

    def _is_exempt(self, path: str) -> bool:
        return path == "/" or any(path.startswith(prefix) for prefix in self.EXEMPT_PREFIXES)

    async def dispatch(self, request: Request, call_next):
        if self._is_exempt(request.url.path):
            return await call_next(request)

        # Skip for OPTIONS requests (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        tenant_header = request.headers.get(settings.TENANT_HEADER)

        if not tenant_header:
            return JSONResponse(
                content={"detail": f"Missing {settings.TENANT_HEADER} header"},
                status_code=status.HTTP_400_BAD_REQUEST
            )

        try:
            tenant_id = UUID(tenant_header)
        except ValueError:
            return JSONResponse(
                content={"detail": f"Invalid {settings.TENANT_HEADER} format. Must be a valid UUID"},
                status_code=status.HTTP_400_BAD_REQUEST
            )

        request.state.tenant_id = tenant_id
        logger.debug(f"Request to {request.url.path} with tenant_id: {tenant_id}")

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers for production
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response
