"""API router package for endpoint composition."""

from .docker import api_create_docker_router
from .health import api_create_health_router
from .system import api_create_system_router

__all__ = ["api_create_docker_router", "api_create_health_router", "api_create_system_router"]
