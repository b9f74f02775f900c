"""Versioned route group — the registration target for controllers."""

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import APIRouter, Depends

from restforge.actions.base import Action
from restforge.api.dependencies import RequestValidator, init_envelope
from restforge.api.dispatch import bind_endpoint
from restforge.discovery.routes import RouteTable, specificity

logger = logging.getLogger(__name__)


class VersionedRouteGroup:
    """APIRouter under the API prefix plus a collision-checking route table.

    Every route in the group gets the envelope dependency; each route also
    gets a RequestValidator configured for its action. Routes are kept
    ordered so literal segments match before parameters in the same
    position (/widget/stats before /widget/{id}).
    """

    def __init__(self, prefix: str, dependencies: Sequence[Any] | None = None):
        self.prefix = prefix
        self.router = APIRouter(
            prefix=prefix,
            dependencies=[Depends(init_envelope), *(dependencies or [])],
        )
        self.routes = RouteTable()

    def add(self, action: Action) -> None:
        owner = type(action).__name__
        path = action.route_path(action.resource)
        self.routes.claim(action.verb, self.prefix + path, owner)

        self.router.add_api_route(
            path,
            bind_endpoint(action),
            methods=[action.verb],
            name=f"{action.resource}.{owner}",
            dependencies=[Depends(RequestValidator(requires_body=action.requires_body))],
            tags=[action.resource],
        )
        self.router.routes.sort(key=lambda route: specificity(route.path))
        logger.debug("Registered %s %s%s -> %s", action.verb, self.prefix, path, owner)
