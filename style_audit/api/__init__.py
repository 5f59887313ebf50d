"""HTTP API for the style audit engine."""

from .audit import router
from .server import app, create_app

__all__ = ["router", "app", "create_app"]
