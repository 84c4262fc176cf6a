"""Shared output formatting. NO class - just functions."""

import json

import click


def print_json(data: dict) -> None:
    """Print JSON data formatted."""
    click.echo(json.dumps(data, indent=2, sort_keys=True, default=str))


def print_error(message: str) -> None:
    """Print error message in red."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)


def print_success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def format_amount(value: float) -> str:
    """Money with thousands separators and two decimals."""
    return f"{value:,.2f}"


def table(headers: list[str], rows: list[list[str]]) -> None:
    """Print simple table for list commands."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(widths):
                widths[i] = max(widths[i], len(str(cell)))

    header_line = "│ " + " │ ".join(h.ljust(widths[i]) for i, h in enumerate(headers)) + " │"
    sep_line = "├" + "─" + "─┼─".join("─" * w for w in widths) + "─┤"

    click.echo("╭" + "─" * (len(header_line) - 2) + "╮")
    click.echo(header_line)
    click.echo(sep_line)
    for row in rows:
        cells = [str(row[i]).ljust(widths[i]) if i < len(row) else " " * widths[i]
                 for i in range(len(headers))]
        click.echo("│ " + " │ ".join(cells) + " │")
    click.echo("╰" + "─" * (len(header_line) - 2) + "╯")
