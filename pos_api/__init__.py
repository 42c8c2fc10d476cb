"""FastAPI application exposing the point-of-sale core over HTTP."""

from .main import create_app

__all__ = ["create_app"]
