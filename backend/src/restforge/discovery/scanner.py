"""Resource discovery.

Layout of the controllers directory (one directory per resource):

    controllers/
        Widget/
            WidgetSearchAction.py      -> class WidgetSearchAction(SearchAction)
            WidgetDeleteAction.py      -> class WidgetDeleteAction(DeleteAction)
            WidgetArchiveAction.py     -> class WidgetArchiveAction(Action), custom verb/path
            WidgetController.py        -> optional ResourceController subclass

The resource's URL name is the directory name lower-cased. The action
kind is the part of the file name between the resource name and
``Action``; standard kinds must subclass the matching base class.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from restforge.actions import Action, ActionKinds
from restforge.discovery.controller import ResourceController
from restforge.discovery.loader import load_class
from restforge.discovery.routes import RouteTable
from restforge.errors import ConfigurationError

logger = logging.getLogger(__name__)

RESOURCE_DIR_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@dataclass
class Resource:
    """A discovered resource and its action classes.

    Attributes:
        name: URL segment, the directory name lower-cased
        class_name: Directory name, the prefix of every class in it
        directory: Path of the resource directory
        actions: Action kind -> action class, in discovery order
        controller_class: ResourceController or a resource-specific subclass
    """

    name: str
    class_name: str
    directory: Path
    actions: dict[str, type[Action]] = field(default_factory=dict)
    controller_class: type[ResourceController] = ResourceController

    @property
    def kinds(self) -> list[str]:
        return list(self.actions)

    def routes(self) -> list[tuple[str, str, str]]:
        """(verb, path, owner) for every action, relative to the API prefix."""
        return [
            (cls.verb, cls.route_path(self.name), cls.__name__)
            for cls in self.actions.values()
        ]


def _action_pattern(class_name: str) -> re.Pattern:
    return re.compile(rf"^{re.escape(class_name)}(?P<kind>[A-Z][A-Za-z0-9_]*)Action\.py$")


def _list_dir(path: Path) -> list[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise ConfigurationError(f"Unable to read directory {path}: {e}") from e


def _check_action_class(cls: type[Action], kind: str, path: Path) -> None:
    base = ActionKinds.get(kind)
    if base is not None:
        if not issubclass(cls, base):
            raise ConfigurationError(
                f"{cls.__name__} in {path} must be a subclass of {base.__name__}"
            )
        return
    if not cls.verb or not cls.path:
        raise ConfigurationError(
            f"Custom action {cls.__name__} in {path} must declare verb and path"
        )


def load_resource(directory: Path) -> Resource | None:
    """Load one resource directory. Returns None if it holds no actions."""
    class_name = directory.name
    resource = Resource(
        name=class_name.lower(),
        class_name=class_name,
        directory=directory,
    )
    pattern = _action_pattern(class_name)

    for entry in _list_dir(directory):
        if not entry.is_file():
            continue
        path = Path(entry.path)

        if entry.name == f"{class_name}Controller.py":
            resource.controller_class = load_class(
                path, f"{class_name}Controller", ResourceController
            )
            continue

        match = pattern.match(entry.name)
        if not match:
            if entry.name.endswith(".py"):
                logger.debug("Ignoring %s: not an action file", path)
            continue

        kind = match.group("kind")
        cls = load_class(path, path.stem, Action)
        _check_action_class(cls, kind, path)
        resource.actions[kind] = cls

    if not resource.actions:
        return None
    return resource


def discover(root: Path) -> list[Resource]:
    """Enumerate resources under ``root``.

    Only directories are resources; files, hidden entries and names that
    are not identifiers are ignored. Directories without action files
    are skipped with a warning.

    Raises:
        ConfigurationError: If the root is missing or unreadable, an action
            file is broken, two directories map to the same resource name,
            or two actions claim the same (verb, path).
    """
    root = Path(root)
    if not root.is_dir():
        raise ConfigurationError(f"Controllers directory not found: {root}")

    resources: list[Resource] = []
    seen: dict[str, Path] = {}
    routes = RouteTable()

    for entry in _list_dir(root):
        if not entry.is_dir():
            continue
        if not RESOURCE_DIR_PATTERN.match(entry.name):
            if not entry.name.startswith((".", "_")):
                logger.warning("Skipping %s: not a valid resource name", entry.path)
            continue

        name = entry.name.lower()
        if name in seen:
            raise ConfigurationError(
                f"Duplicate resource '{name}': {seen[name]} and {entry.path}"
            )

        resource = load_resource(Path(entry.path))
        if resource is None:
            logger.warning("Skipping %s: no action files found", entry.path)
            continue

        for verb, path, owner in resource.routes():
            routes.claim(verb, path, owner)

        seen[name] = Path(entry.path)
        resources.append(resource)
        logger.debug("Discovered resource %s: %s", resource.name, ", ".join(resource.kinds))

    return resources
