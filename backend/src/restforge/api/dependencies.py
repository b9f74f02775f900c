"""Dependencies scoped to the versioned route group.

init_envelope runs first and attaches a fresh ResponseEnvelope to the
request; RequestValidator then checks the identifier and body before
any action runs.
"""

import re

from fastapi import Request

from restforge.actions.types import ResponseEnvelope
from restforge.errors import ValidationError

KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]{1,128}$")


def init_envelope(request: Request) -> ResponseEnvelope:
    """Create the envelope for this request."""
    envelope = ResponseEnvelope()
    request.state.envelope = envelope
    return envelope


def get_envelope(request: Request) -> ResponseEnvelope:
    """Envelope attached by init_envelope, or a fresh one outside the group."""
    envelope = getattr(request.state, "envelope", None)
    if envelope is None:
        envelope = init_envelope(request)
    return envelope


class RequestValidator:
    """Validate path identifier and body for one route.

    Raises ValidationError, which the API maps to a 400 envelope.
    """

    def __init__(self, requires_body: bool = False):
        self.requires_body = requires_body

    def __call__(self, request: Request) -> None:
        errors: list[str] = []

        if "id" in request.path_params:
            key = request.path_params["id"]
            if not KEY_PATTERN.match(key):
                errors.append(f"Invalid identifier: {key!r}")

        if self.requires_body:
            body = getattr(request.state, "json_body", None)
            if body is None:
                errors.append("Request body is required")
            elif not isinstance(body, dict):
                errors.append("Request body must be a JSON object")
            elif not body:
                errors.append("Request body must not be empty")

        if errors:
            raise ValidationError(errors)
