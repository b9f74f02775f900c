"""RestForge CLI entry point."""

import logging

import click

from restforge.config import Settings
from restforge.errors import ConfigurationError


@click.group()
@click.option(
    "--config", "-c", "config_file",
    type=click.Path(dir_okay=False, exists=True),
    default=None,
    help="YAML settings file (environment variables still override it).",
)
@click.pass_context
def cli(ctx: click.Context, config_file: str | None):
    """RestForge — schema-driven REST API framework CLI."""
    try:
        settings = Settings.from_file(config_file) if config_file else Settings.from_env()
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


# Register subcommands
from restforge.cli.forge_cmd import forge  # noqa: E402
from restforge.cli.serve_cmd import routes, serve  # noqa: E402

cli.add_command(forge)
cli.add_command(routes)
cli.add_command(serve)
