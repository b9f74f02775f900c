"""Load action source files as modules.

Action files are plain Python files living outside any package, so they
are imported by path. Load failures are configuration errors: a broken
action file must stop the API from starting.
"""

import importlib.machinery
import importlib.util
import sys
from pathlib import Path
from types import ModuleType

from restforge.errors import ConfigurationError

MODULE_NAMESPACE = "restforge_controllers"


def module_name_for(path: Path) -> str:
    """Stable module name: restforge_controllers.<Resource>.<stem>."""
    return f"{MODULE_NAMESPACE}.{path.parent.name}.{path.stem}"


def _ensure_package(name: str, location: Path | None) -> None:
    """Register a bare package module so relative imports resolve.

    A package re-registered at a different location drops its cached
    submodules.
    """
    search_path = [str(location)] if location is not None else []
    existing = sys.modules.get(name)
    if existing is not None and list(getattr(existing, "__path__", [])) == search_path:
        return

    for cached in [m for m in sys.modules if m.startswith(name + ".")]:
        del sys.modules[cached]
    spec = importlib.machinery.ModuleSpec(name, None, is_package=True)
    spec.submodule_search_locations = search_path
    sys.modules[name] = importlib.util.module_from_spec(spec)


def load_module(path: Path) -> ModuleType:
    """Import a Python file by path.

    Re-importing the same file replaces the previous module, so a
    restarted app sees edits made by the scaffolding engine.

    Raises:
        ConfigurationError: If the file is missing or fails to import.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Action file not found: {path}")

    _ensure_package(MODULE_NAMESPACE, None)
    _ensure_package(f"{MODULE_NAMESPACE}.{path.parent.name}", path.parent)
    module_name = module_name_for(path)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Could not create module spec for: {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except SyntaxError as e:
        sys.modules.pop(module_name, None)
        raise ConfigurationError(f"Syntax error in {path}: {e}") from e
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise ConfigurationError(
            f"Failed to load {path}: {type(e).__name__}: {e}"
        ) from e

    return module


def load_class(path: Path, class_name: str, base: type) -> type:
    """Load ``class_name`` from a file and check it subclasses ``base``.

    Raises:
        ConfigurationError: If the class is missing or has the wrong base.
    """
    module = load_module(path)
    cls = getattr(module, class_name, None)
    if cls is None:
        raise ConfigurationError(f"{path} does not define class {class_name}")
    if not isinstance(cls, type) or not issubclass(cls, base):
        raise ConfigurationError(
            f"{class_name} in {path} must be a subclass of {base.__name__}"
        )
    return cls
