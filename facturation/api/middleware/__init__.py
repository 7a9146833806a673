"""API middleware."""

from facturation.api.middleware.error_handler import ErrorHandlerMiddleware
from facturation.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
