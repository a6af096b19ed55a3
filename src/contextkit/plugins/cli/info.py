"""
CLI command: info

Displays contextkit package version and the registered fetcher keys.
"""

import logging
from importlib.metadata import PackageNotFoundError, version

import click

from contextkit.errors import ConfigurationError
from contextkit.fetch.loader import bootstrap_registry

# Configure module-level logger
logger = logging.getLogger("contextkit.cli.info")


@click.command("info")
@click.pass_context
def cli(ctx) -> None:
    """
    Show package metadata and registered fetchers.
    """
    # Retrieve package version, fallback if not installed
    try:
        pkg_version = version("contextkit")
        logger.debug("Retrieved package version: %s", pkg_version)
    except PackageNotFoundError:
        pkg_version = "0.0.0-dev"
        logger.warning(
            "Package 'contextkit' not found; using development version placeholder."
        )

    click.echo(f"contextkit version: {pkg_version}")

    obj = ctx.find_object(dict) or {}
    try:
        registry = bootstrap_registry(fetchers_file=obj.get("fetchers_file"))
    except ConfigurationError as e:
        logger.error("Failed to bootstrap registry: %s", e)
        click.echo(f"\nRegistry unavailable: {e}")
        return

    click.echo(f"\nRegistered fetchers ({len(registry)}):")
    for key in registry:
        click.echo(f"  - {key}")
