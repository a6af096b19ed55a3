"""
CLI command: fetchers

Lists and describes the fetchers in the bootstrapped registry.
"""

import logging

import click

from contextkit.errors import ConfigurationError
from contextkit.fetch.loader import bootstrap_registry

# Configure module-level logger
logger = logging.getLogger("contextkit.cli.fetchers")


def _load_registry(ctx: click.Context):
    obj = ctx.find_object(dict) or {}
    try:
        return bootstrap_registry(fetchers_file=obj.get("fetchers_file"))
    except ConfigurationError as e:
        logger.error("Failed to bootstrap registry: %s", e)
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()


@click.group("fetchers")
def cli():
    """
    Inspect registered fetchers.
    """
    pass


@cli.command("list")
@click.pass_context
def list_fetchers(ctx):
    """
    List registered fetchers.
    """
    registry = _load_registry(ctx)
    info = registry.get_info()

    if not info:
        click.echo("No fetchers registered.")
        return

    click.echo("Registered fetchers:")
    for key, meta in info.items():
        fallback = " [fallback]" if meta.has_fallback else ""
        click.echo(f"  - {key}: {meta.name}{fallback} - {meta.description}")


@cli.command("show")
@click.argument("key", type=click.STRING)
@click.pass_context
def show_fetcher(ctx, key):
    """
    Show details for the fetcher registered under KEY.
    """
    registry = _load_registry(ctx)
    fetcher = registry.get(key)

    if fetcher is None:
        available = ", ".join(sorted(registry.keys())) or "none"
        click.echo(
            f"Error: No fetcher registered for key: {key}\nAvailable: {available}", err=True
        )
        raise click.Abort()

    meta = registry.get_info()[key]
    click.echo(f"Key: {key}")
    click.echo(f"Name: {meta.name}")
    click.echo(f"Description: {meta.description}")
    click.echo(f"Fallback: {'yes' if meta.has_fallback else 'no'}")
    click.echo(f"Allowed params: {', '.join(meta.allowed_params) or 'any'}")
