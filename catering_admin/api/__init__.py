"""API package exports."""

from catering_admin.api.middleware import CorrelationIdMiddleware
from catering_admin.api.routes import router

__all__ = ["router", "CorrelationIdMiddleware"]
