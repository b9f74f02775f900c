"""Generic CRUD actions.

These never look at the shape of a record: they pass the key and body
from the request context to the gateway and turn the outcome into a
status code. Not-found is an ordinary outcome (404), not an exception.
"""

from collections.abc import Iterable
from typing import Any

from restforge.actions.base import Action, action_kind
from restforge.actions.types import RequestContext, ResponseEnvelope
from restforge.errors import ValidationError
from restforge.persistence.gateway import ModelGateway

RESERVED_QUERY_PARAMS = ("limit", "offset")
MAX_LIMIT = 1000


def check_columns(gateway: ModelGateway, names: Iterable[str]) -> None:
    """Raise ValidationError listing every name that is not a column."""
    columns = set(gateway.columns)
    unknown = [f"Unknown column: {name}" for name in names if name not in columns]
    if unknown:
        raise ValidationError(unknown)


@action_kind("Search")
class SearchAction(Action):
    """List records, filtered by equality on query parameters."""

    verb = "GET"
    path = "/{resource}"

    def _paging(self, query: dict[str, str]) -> tuple[int | None, int]:
        errors = []
        limit: int | None = None
        offset = 0
        if "limit" in query:
            try:
                limit = int(query["limit"])
                if limit < 0 or limit > MAX_LIMIT:
                    raise ValueError
            except ValueError:
                errors.append(f"limit must be an integer between 0 and {MAX_LIMIT}")
        if "offset" in query:
            try:
                offset = int(query["offset"])
                if offset < 0:
                    raise ValueError
            except ValueError:
                errors.append("offset must be a non-negative integer")
        if errors:
            raise ValidationError(errors)
        return limit, offset

    def handle(self, context: RequestContext) -> ResponseEnvelope:
        query = context.query_params
        limit, offset = self._paging(query)

        filters: dict[str, Any] = {
            name: value
            for name, value in query.items()
            if name not in RESERVED_QUERY_PARAMS
        }
        check_columns(self.gateway, filters)

        records = self.gateway.search(filters=filters, limit=limit, offset=offset)
        return context.envelope.set_data(records).set_status(200)


@action_kind("Read")
class ReadAction(Action):
    """Fetch a single record by key."""

    verb = "GET"
    path = "/{resource}/{id}"

    def handle(self, context: RequestContext) -> ResponseEnvelope:
        record = self.gateway.find_by_key(context.key)
        if record is None:
            return context.envelope.set_data(None).set_status(404)
        return context.envelope.set_data(record).set_status(200)


@action_kind("Create")
class CreateAction(Action):
    """Insert a record from the JSON body."""

    verb = "POST"
    path = "/{resource}"
    requires_body = True

    def handle(self, context: RequestContext) -> ResponseEnvelope:
        check_columns(self.gateway, context.body)
        record = self.gateway.create(context.body)
        return context.envelope.set_data(record).set_status(201)


@action_kind("Update")
class UpdateAction(Action):
    """Apply the JSON body to an existing record."""

    verb = "PATCH"
    path = "/{resource}/{id}"
    requires_body = True

    def handle(self, context: RequestContext) -> ResponseEnvelope:
        check_columns(self.gateway, context.body)
        if self.gateway.find_by_key(context.key) is None:
            return context.envelope.set_data(None).set_status(404)

        self.gateway.update(context.key, context.body)
        record = self.gateway.find_by_key(context.key)
        if record is None:
            return context.envelope.set_data(None).set_status(404)
        return context.envelope.set_data(record).set_status(200)


@action_kind("Delete")
class DeleteAction(Action):
    """Destroy a record by key.

    Success is exactly one affected row; any other count is a 404.
    """

    verb = "DELETE"
    path = "/{resource}/{id}"

    def handle(self, context: RequestContext) -> ResponseEnvelope:
        key = context.key
        self.gateway.find_by_key(key)

        if self.gateway.destroy(key) == 1:
            status = 200
        else:
            status = 404

        return context.envelope.set_data(None).set_status(status)
