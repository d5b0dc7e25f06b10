"""
API module - FastAPI endpoints.
"""

from .router import (
    SERVICE_PATH,
    create_language_service_app,
    get_service,
    parse_language_request,
    router,
    set_service,
)

__all__ = [
    "SERVICE_PATH",
    "router",
    "set_service",
    "get_service",
    "parse_language_request",
    "create_language_service_app",
]
