"""Scaffolding — generate action source files for new entities."""

from restforge.scaffold.forge import (
    ForgeResult,
    class_name_for,
    forge_action,
    forge_resource,
    target_path,
    write_action,
)
from restforge.scaffold.templates import render_action

__all__ = [
    "ForgeResult",
    "class_name_for",
    "forge_action",
    "forge_resource",
    "render_action",
    "target_path",
    "write_action",
]
