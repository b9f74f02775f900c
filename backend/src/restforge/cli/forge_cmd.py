"""Forge command — generate action files for entities."""

from pathlib import Path

import click

from restforge.actions import STANDARD_KINDS
from restforge.config import Settings
from restforge.scaffold import forge_resource


@click.command()
@click.argument("entities", nargs=-1)
@click.option(
    "--kind", "-k", "kinds",
    multiple=True,
    type=click.Choice(STANDARD_KINDS),
    help="Action kind to generate (repeatable). Defaults to Search.",
)
@click.option("--all-kinds", is_flag=True, default=False, help="Generate every standard kind.")
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="Overwrite action files that already exist.",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Controllers directory (defaults to RESTFORGE_CONTROLLERS_PATH).",
)
@click.pass_obj
def forge(
    settings: Settings | None,
    entities: tuple[str, ...],
    kinds: tuple[str, ...],
    all_kinds: bool,
    force: bool,
    root: Path | None,
):
    """Generate action files for ENTITIES (table or view names).

    Prompts for an entity when none is given. Every entity is attempted;
    the exit code is 1 if any file could not be written.

        restforge forge widget
        restforge forge order_item --kind Read --kind Delete
        restforge forge widget --all-kinds --force
    """
    settings = settings or Settings.from_env()
    root = root or settings.controllers_path

    if not entities:
        entity = click.prompt("Entity (table or view) name").strip()
        entities = (entity,)

    if all_kinds:
        kinds = STANDARD_KINDS
    elif not kinds:
        kinds = ("Search",)

    failures = 0
    for entity in entities:
        for result in forge_resource(entity, root, kinds=kinds, force=force):
            if result.ok:
                click.echo(f"Created: {result.path}")
            else:
                failures += 1
                click.echo(f"Error: {result.error}", err=True)

    if failures:
        click.echo(f"{failures} file(s) could not be written.", err=True)
        raise SystemExit(1)
