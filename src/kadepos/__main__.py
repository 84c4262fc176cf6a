"""
Entry point for running KadePOS as a module.

Usage:
    python -m kadepos [command] [options]

Example:
    python -m kadepos offline status
    python -m kadepos offline sync --force
    python -m kadepos order place --item 1:Rice:100:2
"""

from kadepos.cli.main import cli

if __name__ == "__main__":
    cli()
