"""Per-request types shared by actions and the pipeline.

- ResponseEnvelope: data + status wrapper every action fills in
- RequestContext: state threaded from the pipeline into an action
"""

from dataclasses import dataclass, field
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.requests import Request


class EnvelopePayload(BaseModel):
    """Wire format of a response envelope."""

    data: Any = None
    status: int
    message: str | None = None
    errors: list[str] = []


class ResponseEnvelope:
    """Mutable response builder.

    Setters return the envelope so calls can be chained:

        return envelope.set_data(None).set_status(404)

    Calling the envelope serializes it into a JSONResponse carrying its
    status code.
    """

    def __init__(self, data: Any = None, status: int = 200):
        self.data = data
        self.status = status
        self.message: str | None = None
        self.errors: list[str] = []
        self.extra: dict[str, Any] = {}

    def set_data(self, data: Any) -> "ResponseEnvelope":
        self.data = data
        return self

    def set_status(self, status: int) -> "ResponseEnvelope":
        self.status = status
        return self

    def set_message(self, message: str | None) -> "ResponseEnvelope":
        self.message = message
        return self

    def add_error(self, error: str) -> "ResponseEnvelope":
        self.errors.append(error)
        return self

    def to_dict(self) -> dict[str, Any]:
        payload = EnvelopePayload(
            data=jsonable_encoder(self.data),
            status=self.status,
            message=self.message,
            errors=self.errors,
        ).model_dump()
        payload.update(self.extra)
        return payload

    def __call__(self, headers: dict[str, str] | None = None) -> JSONResponse:
        return JSONResponse(
            status_code=self.status,
            content=self.to_dict(),
            headers=headers,
        )

    def __repr__(self) -> str:
        return f"ResponseEnvelope(status={self.status}, data={self.data!r})"


@dataclass
class RequestContext:
    """Runtime state for one in-flight request.

    Attributes:
        request: The raw Starlette request
        envelope: Envelope created for this request by the pipeline
        path_params: Matched path parameters (e.g. {"id": "42"})
        query_params: Query string as a plain dict (last value wins)
        body: Parsed JSON body, or None when the request had none
    """

    request: Request | None
    envelope: ResponseEnvelope
    path_params: dict[str, str] = field(default_factory=dict)
    query_params: dict[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def key(self) -> str | None:
        """Record identifier from the path, if the route has one."""
        return self.path_params.get("id")
