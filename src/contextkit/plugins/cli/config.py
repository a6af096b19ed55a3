"""
CLI command: config

Configuration management commands.
"""

import logging

import click

from contextkit.settings import settings

# Configure module-level logger
logger = logging.getLogger("contextkit.cli.config")


@click.group("config")
def cli():
    """
    Configuration management commands.
    """
    pass


@cli.command("show")
@click.pass_context
def show_config(ctx):
    """
    Show current configuration.
    """
    obj = ctx.find_object(dict) or {}

    click.echo("contextkit Configuration")
    click.echo("=" * 30)
    click.echo(f"Fetchers File: {obj.get('fetchers_file') or settings.fetchers_file or 'not set'}")
    click.echo(f"Max Workers: {settings.max_workers}")
    click.echo(f"Skip Unregistered: {settings.skip_unregistered}")
    click.echo(f"Log Level: {obj.get('log_level') or settings.log_level}")
