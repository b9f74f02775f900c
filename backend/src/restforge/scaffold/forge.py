"""Action file generator.

Writes ``<root>/<ClassName>/<ClassName><Kind>Action.py`` so the next
app start discovers the new action. Existing files are never replaced
unless ``force`` is set:

- without force the file is created exclusively, so a concurrent or
  repeated run fails instead of overwriting
- with force the new text goes to a temporary file that atomically
  replaces the target, so a failed write leaves the old file intact

Public functions return error strings instead of raising, so a batch
of entities can report every failure.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from restforge.errors import ScaffoldingError
from restforge.scaffold.templates import render_action

logger = logging.getLogger(__name__)

ENTITY_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
FILE_MODE = 0o644


@dataclass
class ForgeResult:
    """Outcome of one generation job."""

    entity: str
    kind: str
    path: Path | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def class_name_for(entity: str) -> str:
    """Normalize an entity (table/view) name to the class-naming convention.

    widget -> Widget, order_item -> OrderItem, orderItem -> OrderItem
    """
    parts = [p for p in entity.strip().split("_") if p]
    return "".join(p[0].upper() + p[1:] for p in parts)


def target_path(entity: str, root: Path, kind: str = "Search") -> Path:
    """Path the action file for ``entity`` / ``kind`` is written to."""
    class_name = class_name_for(entity)
    return Path(root) / class_name / f"{class_name}{kind}Action.py"


def _ensure_directory(directory: Path) -> None:
    if directory.is_dir():
        return
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ScaffoldingError(f"Unable to create directory ({e.strerror})", str(directory)) from e


def _write_exclusive(path: Path, content: str) -> None:
    try:
        with open(path, "x") as f:
            try:
                f.write(content)
            except OSError:
                f.close()
                path.unlink(missing_ok=True)
                raise
    except FileExistsError as e:
        raise ScaffoldingError("File already exists (use --force to overwrite)", str(path)) from e
    except OSError as e:
        raise ScaffoldingError(f"Unable to create ({e.strerror})", str(path)) from e


def _write_replace(path: Path, content: str) -> None:
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
    except OSError as e:
        raise ScaffoldingError(f"Unable to create ({e.strerror})", str(path)) from e

    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.chmod(tmp_name, FILE_MODE)
        os.replace(tmp_name, path)
    except OSError as e:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise ScaffoldingError(f"Unable to create ({e.strerror})", str(path)) from e


def write_action(entity: str, root: Path, kind: str = "Search", force: bool = False) -> Path:
    """Render and write one action file.

    Raises:
        ScaffoldingError: On an invalid entity, template error, or any
            directory/file failure. The message names the path involved.
    """
    if not ENTITY_PATTERN.match(entity.strip()):
        raise ScaffoldingError("Invalid entity name", entity)

    entity = entity.strip()
    class_name = class_name_for(entity)
    path = target_path(entity, root, kind)

    try:
        content = render_action(kind, class_name, entity)
    except KeyError as e:
        raise ScaffoldingError(str(e.args[0]), str(path)) from e

    _ensure_directory(path.parent)
    if force:
        _write_replace(path, content)
    else:
        _write_exclusive(path, content)

    logger.info("Wrote %s", path)
    return path


def forge_action(
    entity: str,
    root: Path,
    kind: str = "Search",
    force: bool = False,
) -> str | None:
    """Generate one action file.

    Returns:
        None on success, otherwise a message naming the failed path.
    """
    try:
        write_action(entity, root, kind=kind, force=force)
    except ScaffoldingError as e:
        logger.warning("forge %s %s failed: %s", entity, kind, e)
        return str(e)
    return None


def forge_resource(
    entity: str,
    root: Path,
    kinds: list[str] | tuple[str, ...] = ("Search",),
    force: bool = False,
) -> list[ForgeResult]:
    """Generate several action kinds for one entity; never stops early."""
    results = []
    for kind in kinds:
        try:
            path = write_action(entity, root, kind=kind, force=force)
        except ScaffoldingError as e:
            results.append(ForgeResult(entity=entity, kind=kind, path=None, error=str(e)))
        else:
            results.append(ForgeResult(entity=entity, kind=kind, path=path))
    return results
