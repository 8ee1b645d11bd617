from .cors import CORS_HEADERS, CorsHeadersMiddleware
from .error_handling import ErrorHandlingMiddleware, register_error_handlers
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "CORS_HEADERS",
    "CorsHeadersMiddleware",
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "register_error_handlers",
]
