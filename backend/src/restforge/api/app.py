"""FastAPI application assembly.

create_app() discovers resources, binds their actions to gateways,
registers one route group under the API prefix and stacks middleware.
Request flow, outer to inner:

    ErrorHandlingMiddleware -> CorsPreflightMiddleware (optional)
    -> JsonBodyParserMiddleware -> routing
    -> [group] init_envelope -> RequestValidator -> action
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from restforge.api.dependencies import get_envelope
from restforge.api.middleware import (
    CorsPreflightMiddleware,
    ErrorHandlingMiddleware,
    JsonBodyParserMiddleware,
)
from restforge.api.routing import VersionedRouteGroup
from restforge.config import Settings
from restforge.discovery import ResourceController, discover
from restforge.errors import NotFoundError, RestForgeError, ValidationError
from restforge.persistence import Database

logger = logging.getLogger(__name__)


def _restforge_error_handler(request: Request, exc: RestForgeError) -> JSONResponse:
    """Map ValidationError / NotFoundError to envelopes."""
    envelope = get_envelope(request).set_data(None).set_status(exc.status_code)
    envelope.set_message(str(exc))
    for error in getattr(exc, "errors", []):
        envelope.add_error(error)
    return envelope()


def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing misses (404 / 405) as envelopes."""
    envelope = get_envelope(request).set_data(None).set_status(exc.status_code)
    envelope.set_message(str(exc.detail))
    return envelope(headers=getattr(exc, "headers", None))


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    envelope = get_envelope(request).set_data(None).set_status(422)
    envelope.set_message("Invalid request")
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        envelope.add_error(f"{location}: {error.get('msg', '')}")
    return envelope()


def build_controllers(settings: Settings, database: Database) -> list[ResourceController]:
    """Discover resources and bind every action to its table's gateway.

    Raises:
        ConfigurationError: On any discovery or reflection failure.
    """
    resources = discover(settings.controllers_path)
    return [r.controller_class.build(r, database.gateway) for r in resources]


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
) -> FastAPI:
    """Build the API.

    Args:
        settings: Runtime settings (defaults to Settings.from_env()).
        database: Database to bind gateways to. When omitted one is created
            from settings and disposed on shutdown.

    Raises:
        ConfigurationError: If discovery fails; no partial API is built.
    """
    settings = settings or Settings.from_env()
    owns_database = database is None
    if database is None:
        database = Database.from_settings(settings)

    try:
        controllers = build_controllers(settings, database)
        group = VersionedRouteGroup(settings.api_prefix)
        for controller in controllers:
            controller.register(group)
    except Exception:
        if owns_database:
            database.close()
        raise

    if not controllers:
        logger.warning("No resources found in %s", settings.controllers_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Serving %d resource(s), %d route(s) under %s",
            len(controllers),
            len(group.routes),
            settings.api_prefix or "/",
        )
        yield
        if owns_database:
            database.close()

    app = FastAPI(title="RestForge API", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.controllers = controllers
    app.state.routes = group.routes

    app.include_router(group.router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.add_exception_handler(ValidationError, _restforge_error_handler)
    app.add_exception_handler(NotFoundError, _restforge_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    # Inner to outer
    app.add_middleware(JsonBodyParserMiddleware)
    if settings.cors:
        app.add_middleware(CorsPreflightMiddleware)
    app.add_middleware(
        ErrorHandlingMiddleware,
        display_error_details=settings.display_error_details,
    )

    return app
