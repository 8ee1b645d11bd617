"""
Error handling middleware.
Last line of defence: anything the relay did not anticipate becomes a
structured 500 response instead of an unstructured server error.
"""
import logging
import traceback
from typing import Callable, Iterable

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from tutor_relay.api.models import ErrorKind, ErrorResponse
from tutor_relay.config.settings import Settings, get_settings
from tutor_relay.controllers import method_not_allowed_response
from tutor_relay.services.credentials import redact

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI, relay_paths: Iterable[str] = ()) -> None:
    """Register handlers for errors raised by routing, before any endpoint runs."""
    relay_paths = frozenset(relay_paths)

    @app.exception_handler(status.HTTP_405_METHOD_NOT_ALLOWED)
    async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Verbs outside a route's method list never reach the endpoint
        if request.url.path in relay_paths:
            result = method_not_allowed_response()
            return JSONResponse(
                status_code=result.status_code,
                content=result.content,
                headers=result.headers,
            )

        headers = dict(exc.headers or {})
        body = ErrorResponse.for_kind(
            ErrorKind.METHOD_NOT_ALLOWED,
            message=f"{request.method} is not supported on this endpoint",
            details={"allowed_methods": headers.get("Allow", "")},
        )
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content=body.to_content(),
            headers=headers,
        )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling and logging."""

    def __init__(self, app, settings_factory: Callable[[], Settings] = get_settings):
        super().__init__(app)
        self.settings_factory = settings_factory

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            tb_str = traceback.format_exc()

            try:
                settings = self.settings_factory()
                is_production = settings.is_production
                secrets = settings.credentials
            except Exception:
                is_production = True  # Default to production mode for safety
                secrets = []

            logger.error(
                "Unhandled error",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error": redact(str(e), *secrets),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )

            # Don't expose internal errors in production
            if is_production:
                body = ErrorResponse.for_kind(
                    ErrorKind.INTERNAL_ERROR,
                    message="An internal error occurred. Please try again later.",
                )
            else:
                body = ErrorResponse.for_kind(
                    ErrorKind.INTERNAL_ERROR,
                    message=redact(f"{type(e).__name__}: {str(e)}", *secrets),
                    traceback=redact(tb_str, *secrets),
                )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=body.to_content(),
            )
