"""
CLI command: context

Runs an aggregation against the bootstrapped registry and prints the result
as JSON.
"""

import json
import logging
from typing import Any, Dict, Tuple

import click

from contextkit.errors import ConfigurationError, ValidationError
from contextkit.fetch.loader import bootstrap_registry
from contextkit.pipeline import FetchRequest, build_context

# Configure module-level logger
logger = logging.getLogger("contextkit.cli.context")


def parse_json_object(value: str, what: str) -> Dict[str, Any]:
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{what} is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise click.BadParameter(f"{what} must be a JSON object")
    return data


def parse_request(raw: str) -> FetchRequest:
    """
    Parse ``key`` or ``key=<json object>`` into a FetchRequest.
    """
    key, sep, raw_params = raw.partition("=")
    params = parse_json_object(raw_params, f"Parameters for '{key}'") if sep else {}
    try:
        return FetchRequest(key=key, params=params)
    except ValueError as e:
        raise click.BadParameter(f"Invalid fetch request '{raw}': {e}")


@click.group("context")
def cli():
    """
    Build enriched contexts from registered fetchers.
    """
    pass


@cli.command("run")
@click.argument("requests", nargs=-1, required=True)
@click.option("--base", "base_json", default="{}", help="Base data as a JSON object")
@click.option("--parallel/--sequential", default=False, help="Run fetchers in parallel")
@click.option(
    "--skip-unregistered",
    is_flag=True,
    help="Skip keys with no registered fetcher instead of failing",
)
@click.pass_context
def run_context(
    ctx, requests: Tuple[str, ...], base_json: str, parallel: bool, skip_unregistered
) -> None:
    """
    Fetch REQUESTS (each KEY or KEY='{"param": ...}') and print the merged context.
    """
    base = parse_json_object(base_json, "Base data")
    fetch_requests = [parse_request(raw) for raw in requests]
    obj = ctx.find_object(dict) or {}

    try:
        registry = bootstrap_registry(fetchers_file=obj.get("fetchers_file"))
        context = build_context(
            registry,
            base,
            fetch_requests,
            skip_unregistered=skip_unregistered or None,
            parallel=parallel,
        )
    except (ConfigurationError, ValidationError) as e:
        logger.error("Context aggregation failed: %s", e)
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    payload = {"context": context.to_mapping(), "errors": dict(context.errors)}
    click.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))
