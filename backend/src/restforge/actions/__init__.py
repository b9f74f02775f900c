"""Action contract and generic CRUD actions.

Usage:
    from restforge.actions import SearchAction

    class WidgetSearchAction(SearchAction):
        table = "widget"
"""

from restforge.actions.base import Action, ActionKinds, action_kind
from restforge.actions.crud import (
    CreateAction,
    DeleteAction,
    ReadAction,
    SearchAction,
    UpdateAction,
)
from restforge.actions.types import RequestContext, ResponseEnvelope

STANDARD_KINDS = ("Create", "Read", "Update", "Delete", "Search")

__all__ = [
    "Action",
    "ActionKinds",
    "CreateAction",
    "DeleteAction",
    "ReadAction",
    "RequestContext",
    "ResponseEnvelope",
    "STANDARD_KINDS",
    "SearchAction",
    "UpdateAction",
    "action_kind",
]
