"""Process-wide HTTP middleware.

Starlette runs the most recently added middleware first, so create_app()
adds them inner to outer:

    JsonBodyParserMiddleware   parse JSON bodies into request.state.json_body
    CorsPreflightMiddleware    answer OPTIONS with permissive CORS headers (optional)
    ErrorHandlingMiddleware    turn any uncaught exception into a 500 envelope
"""

from __future__ import annotations

import json
import logging
import traceback

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from restforge.actions.types import ResponseEnvelope

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH", "DELETE")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Headers": "X-Requested-With, Content-Type, Accept, Origin, Authorization",
    "Access-Control-Allow-Methods": "GET, POST, PATCH, DELETE, OPTIONS",
}

GENERIC_ERROR_MESSAGE = "An error occurred."


class JsonBodyParserMiddleware(BaseHTTPMiddleware):
    """Parse JSON request bodies once, before routing.

    Requests without a JSON content type leave ``json_body`` as None.
    Malformed JSON short-circuits with a 400 envelope.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.json_body = None

        content_type = request.headers.get("content-type", "")
        if request.method in BODY_METHODS and "json" in content_type:
            raw = await request.body()
            if raw.strip():
                try:
                    request.state.json_body = json.loads(raw)
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    envelope = ResponseEnvelope(status=400)
                    envelope.set_message("Malformed JSON body").add_error(str(e))
                    return envelope()

        return await call_next(request)


class CorsPreflightMiddleware(BaseHTTPMiddleware):
    """Answer every OPTIONS request with 200 and permissive CORS headers."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method != "OPTIONS":
            return await call_next(request)
        return ResponseEnvelope(status=200)(headers=CORS_HEADERS)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Outermost catch-all.

    Every exception that escapes the rest of the stack is logged and
    converted into a 500 envelope. Diagnostic detail (type, message,
    traceback) is included only when display_error_details is set.
    """

    def __init__(self, app: ASGIApp, display_error_details: bool = False):
        super().__init__(app)
        self.display_error_details = display_error_details

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return error_envelope(exc, self.display_error_details)()


def error_envelope(exc: BaseException, display_error_details: bool) -> ResponseEnvelope:
    """Build the 500 envelope for an unhandled exception."""
    envelope = ResponseEnvelope(status=500).set_message(GENERIC_ERROR_MESSAGE)
    if display_error_details:
        envelope.add_error(f"{type(exc).__name__}: {exc}")
        envelope.extra["detail"] = {
            "type": type(exc).__name__,
            "message": str(exc),
            "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return envelope
