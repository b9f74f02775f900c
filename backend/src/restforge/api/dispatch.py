"""Bind actions to endpoints and serve the app.

Each endpoint builds a RequestContext from the request, calls the
action's handle() exactly once, and returns the serialized envelope.
Endpoints are plain functions, so Starlette runs them in its thread
pool; nothing is shared between requests except the gateway's engine.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Request
from fastapi.responses import JSONResponse

from restforge.actions.base import Action
from restforge.actions.types import RequestContext
from restforge.api.dependencies import get_envelope
from restforge.config import Settings


def build_context(request: Request) -> RequestContext:
    """Collect per-request state populated by the middleware chain."""
    return RequestContext(
        request=request,
        envelope=get_envelope(request),
        path_params=dict(request.path_params),
        query_params=dict(request.query_params),
        body=getattr(request.state, "json_body", None),
    )


def bind_endpoint(action: Action) -> Callable[[Request], JSONResponse]:
    """Wrap an action in a FastAPI endpoint function."""

    def endpoint(request: Request) -> JSONResponse:
        envelope = action.handle(build_context(request))
        return envelope()

    endpoint.__name__ = f"{action.resource}_{type(action).__name__}"
    endpoint.__doc__ = type(action).__doc__
    endpoint.action = action  # type: ignore[attr-defined]
    return endpoint


def serve(
    settings: Settings | None = None,
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """Run the API under uvicorn.

    With reload enabled uvicorn re-imports the app factory, which re-reads
    settings from the environment, so ``settings`` only applies without it.
    """
    import uvicorn

    settings = settings or Settings.from_env()
    if reload:
        uvicorn.run(
            "restforge.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level=settings.log_level,
        )
        return

    from restforge.api.app import create_app

    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level)
