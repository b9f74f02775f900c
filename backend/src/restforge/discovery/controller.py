"""Resource controllers — bind a discovered resource's actions to routes."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from restforge.actions.base import Action
from restforge.errors import ConfigurationError
from restforge.persistence.gateway import ModelGateway

if TYPE_CHECKING:
    from restforge.discovery.scanner import Resource


class RouteGroup(Protocol):
    """Anything actions can be registered into (see restforge.api.routing)."""

    def add(self, action: Action) -> None: ...


class ResourceController:
    """Owns the bound actions of one resource.

    A resource directory may ship ``<Resource>Controller.py`` with a
    subclass that overrides register(), e.g. to add routes or change
    registration order.
    """

    def __init__(self, resource: Resource, actions: list[Action]):
        self.resource = resource
        self.actions = actions

    @classmethod
    def build(
        cls,
        resource: Resource,
        gateway_for: Callable[[str], ModelGateway],
    ) -> ResourceController:
        """Instantiate every action of ``resource`` with its gateway.

        Raises:
            ConfigurationError: If a keyed action is bound to a table or
                view without a single-column primary key.
        """
        actions = []
        for action_cls in resource.actions.values():
            table = action_cls.table or resource.name
            gateway = gateway_for(table)
            if action_cls.is_keyed() and gateway.key_name is None:
                raise ConfigurationError(
                    f"{action_cls.__name__} addresses records by id, but "
                    f"'{table}' has no single-column primary key"
                )
            actions.append(action_cls(gateway=gateway, resource=resource.name))
        return cls(resource, actions)

    def register(self, group: RouteGroup) -> None:
        for action in self.actions:
            group.add(action)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.resource.name}, {len(self.actions)} action(s))"
