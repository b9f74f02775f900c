"""HTTP layer — pipeline assembly, middleware and dispatch."""

from restforge.api.app import create_app
from restforge.api.dispatch import bind_endpoint, serve

__all__ = ["bind_endpoint", "create_app", "serve"]
