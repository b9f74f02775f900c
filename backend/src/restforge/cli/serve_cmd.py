"""Serve and routes commands."""

from pathlib import Path

import click

from restforge.config import Settings
from restforge.discovery import RouteTable, discover
from restforge.errors import ConfigurationError


@click.command()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Controllers directory (defaults to RESTFORGE_CONTROLLERS_PATH).",
)
@click.pass_obj
def routes(settings: Settings | None, root: Path | None):
    """List the routes discovery would register."""
    settings = settings or Settings.from_env()
    root = root or settings.controllers_path

    try:
        resources = discover(root)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if not resources:
        click.echo(f"No resources found in {root}")
        return

    table = RouteTable()
    for resource in resources:
        for verb, path, owner in resource.routes():
            table.claim(verb, settings.api_prefix + path, owner)

    for claim in table:
        click.echo(f"{claim.verb:<7} {claim.path:<40} -> {claim.owner}")
    click.echo(f"\n{len(resources)} resource(s), {len(table)} route(s)")


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, default=False, help="Restart on code changes.")
@click.pass_obj
def serve(settings: Settings | None, host: str, port: int, reload: bool):
    """Run the API server."""
    from restforge.api.dispatch import serve as run_server

    settings = settings or Settings.from_env()
    try:
        run_server(settings, host=host, port=port, reload=reload)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
