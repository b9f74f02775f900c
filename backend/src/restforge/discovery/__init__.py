"""Resource discovery — find action classes by directory convention."""

from restforge.discovery.controller import ResourceController
from restforge.discovery.routes import RouteClaim, RouteTable
from restforge.discovery.scanner import Resource, discover, load_resource

__all__ = [
    "Resource",
    "ResourceController",
    "RouteClaim",
    "RouteTable",
    "discover",
    "load_resource",
]
