"""KadePOS CLI entry point - assembles all command groups."""
import logging

import click

from kadepos import __version__

from .menu_cmd import menu
from .offline_cmd import offline
from .order_cmd import order


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log events and debug detail")
def cli(verbose: bool):
    """KadePOS: orders that survive a dropped connection."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


cli.add_command(offline)
cli.add_command(order)
cli.add_command(menu)


if __name__ == "__main__":
    cli()
