"""Action contract and the registry of standard action kinds.

Every action handles one (verb, path) for one resource:

    class WidgetDeleteAction(DeleteAction):
        table = "widget"

Discovery instantiates the class with the gateway for ``table`` and binds
``handle`` to the route. Path patterns use ``{resource}`` for the resource
name and ``{id}`` for the record key.
"""

from typing import ClassVar

from restforge.actions.types import RequestContext, ResponseEnvelope
from restforge.persistence.gateway import ModelGateway


class Action:
    """Base class for all actions.

    Subclasses set ``verb`` and ``path`` (custom actions) or inherit them
    from one of the standard kinds, and implement handle().
    """

    verb: ClassVar[str] = ""
    path: ClassVar[str] = ""
    # Table or view backing the resource; defaults to the resource name
    table: ClassVar[str | None] = None
    # Request validation rejects requests without a JSON object body
    requires_body: ClassVar[bool] = False

    def __init__(self, gateway: ModelGateway, resource: str = ""):
        self.gateway = gateway
        self.resource = resource

    def handle(self, context: RequestContext) -> ResponseEnvelope:
        raise NotImplementedError

    @classmethod
    def route_path(cls, resource: str) -> str:
        """Concrete path for this action under a resource name."""
        return cls.path.replace("{resource}", resource)

    @classmethod
    def is_keyed(cls) -> bool:
        """True when the path addresses a single record by ``{id}``."""
        return "{id}" in cls.path

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.verb} {self.route_path(self.resource)})"


class ActionKinds:
    """Registry of standard action kinds (kind name -> base class).

    Populated at import time by restforge.actions.crud. Discovery uses it
    to check that ``<Resource>SearchAction`` really is a SearchAction.
    """

    _kinds: dict[str, type[Action]] = {}

    @classmethod
    def register(cls, name: str, base: type[Action]) -> None:
        if name in cls._kinds and cls._kinds[name] is not base:
            raise ValueError(f"Action kind '{name}' is already registered")
        cls._kinds[name] = base

    @classmethod
    def get(cls, name: str) -> type[Action] | None:
        return cls._kinds.get(name)


def action_kind(name: str):
    """Class decorator registering a standard action kind."""

    def decorator(base: type[Action]) -> type[Action]:
        ActionKinds.register(name, base)
        return base

    return decorator
