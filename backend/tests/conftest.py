"""Shared fixtures: a seeded SQLite database and a controllers directory."""

import textwrap
from pathlib import Path

import pytest
from sqlalchemy import text

from restforge.config import Settings
from restforge.persistence import Database


def write_action(
    root: Path,
    class_name: str,
    kind: str,
    base: str | None = None,
    table: str | None = None,
    body: str = "",
) -> Path:
    """Write ``<root>/<class_name>/<class_name><kind>Action.py``.

    ``base`` defaults to the standard ``<kind>Action`` class; ``body`` is
    extra class-level source (dedented, then indented into the class).
    """
    directory = root / class_name
    directory.mkdir(parents=True, exist_ok=True)
    base = base or f"{kind}Action"

    lines = [
        f"from restforge.actions import {base}",
        "",
        "",
        f"class {class_name}{kind}Action({base}):",
        f'    table = "{table or class_name.lower()}"',
    ]
    if body:
        lines.append(textwrap.indent(textwrap.dedent(body).strip("\n"), "    "))

    path = directory / f"{class_name}{kind}Action.py"
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def database(tmp_path):
    """SQLite database with a seeded widget table and an empty gadget table."""
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    with db.engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE widget (id INTEGER PRIMARY KEY, name TEXT NOT NULL, color TEXT)"
        ))
        conn.execute(text("CREATE TABLE gadget (code TEXT PRIMARY KEY, label TEXT)"))
        conn.execute(text(
            "INSERT INTO widget (id, name, color) VALUES "
            "(1, 'sprocket', 'red'), (2, 'cog', 'blue'), (3, 'gear', 'red')"
        ))
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def controllers(tmp_path):
    root = tmp_path / "controllers"
    root.mkdir()
    return root


@pytest.fixture
def settings(controllers):
    return Settings(database_url="sqlite://", controllers_path=controllers)
