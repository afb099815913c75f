"""HTTP middleware."""
from apollusia.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
