"""API package for the read-only display surface."""

from .application import create_api_application

__all__ = ["create_api_application"]
