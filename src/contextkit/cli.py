"""
Core contextkit CLI: dynamically loads commands from plugins/cli.
"""

import importlib
import logging
import pathlib
import pkgutil

import click

from contextkit.settings import LOG_LEVELS, settings

# Logging configuration
logger = logging.getLogger("contextkit")
handler = logging.StreamHandler()
formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
handler.setFormatter(formatter)
logger.addHandler(handler)
logger.setLevel(settings.log_level)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=settings.log_level,
    help="Set logging level",
)
@click.option(
    "--fetchers-file",
    type=click.Path(dir_okay=False, path_type=pathlib.Path),
    default=None,
    help="YAML file declaring the fetchers to register",
)
@click.pass_context
def main(ctx, log_level, fetchers_file):
    """
    contextkit CLI
    """
    log_level = log_level.upper()
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["fetchers_file"] = fetchers_file

    # Update logging level
    logger.setLevel(log_level)


def load_commands():
    """
    Auto-discover and register click commands from contextkit/plugins/cli/*.py
    Each plugin module must define a top-level `cli` click.Command.
    """
    plugins_path = pathlib.Path(__file__).parent / "plugins" / "cli"
    package = "contextkit.plugins.cli"
    for _, module_name, _ in pkgutil.iter_modules([str(plugins_path)]):
        full_name = f"{package}.{module_name}"
        try:
            module = importlib.import_module(full_name)
            cmd = getattr(module, "cli", None)
            if isinstance(cmd, click.Command):
                main.add_command(cmd)
        except Exception as e:
            logger.error(f"Failed to load plugin {full_name}: {e}")


# Load all plugin commands
load_commands()

if __name__ == "__main__":
    main()
