"""covmerge CLI - merge coverage profiles of re-executed processes."""

import click

from covmerge import __version__
from covmerge.cli.merge import merge_command
from covmerge.cli.show import show_command
from covmerge.config import load_config
from covmerge.core.errors import ConfigError
from covmerge.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="covmerge")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """covmerge - combine coverage profiles into one summary profile."""
    try:
        config = load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


cli.add_command(merge_command, name="merge")
cli.add_command(show_command, name="show")


if __name__ == "__main__":
    cli()
