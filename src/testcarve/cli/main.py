"""testcarve CLI - tcarve command."""

from pathlib import Path

import click

from testcarve.cli.extract import extract_command
from testcarve.config.loader import load_config
from testcarve.core.errors import ConfigError
from testcarve.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="tcarve")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """testcarve - Carve single tests with their source closure out of a JCK-style corpus."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.UsageError(e.message, ctx=ctx) from e

    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)

    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


cli.add_command(extract_command, name="extract")


if __name__ == "__main__":
    cli()
