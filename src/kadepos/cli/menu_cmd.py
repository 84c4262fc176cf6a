"""Menu CLI commands."""
import asyncio
import sys

import click

from kadepos.core.constants import MENU_CATEGORIES
from kadepos.core.errors import RemoteWriteError

from . import runtime
from .output import format_amount, print_error, table


def _category_rank(category: str) -> int:
    try:
        return MENU_CATEGORIES.index(category)
    except ValueError:
        return len(MENU_CATEGORIES)


@click.group()
def menu():
    """Menu commands."""
    pass


@menu.command('list')
def list_items():
    """List available menu items by category."""
    settings = runtime.load_settings()
    api = runtime.build_api(settings)
    try:
        items = asyncio.run(api.list_menu_items())
    except RemoteWriteError as e:
        print_error(f"Menu fetch failed: {e}")
        sys.exit(1)

    if not items:
        click.echo("No menu items available")
        return

    items = sorted(items, key=lambda i: (_category_rank(i.category), i.category, i.name))
    table(
        ["ID", "Category", "Name", "Price"],
        [[str(i.id), i.category, i.name, format_amount(i.price)] for i in items],
    )
