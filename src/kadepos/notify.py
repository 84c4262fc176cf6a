"""User-visible notices (toasts) raised by the offline machinery."""
from typing import Protocol

import click


class Notifier(Protocol):
    def info(self, message: str) -> None: ...
    def success(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class ConsoleNotifier:
    """Print notices to the terminal in colour."""

    def __init__(self, err: bool = True):
        self.err = err

    def _echo(self, message: str, fg: str | None = None) -> None:
        click.echo(click.style(message, fg=fg), err=self.err)

    def info(self, message: str) -> None:
        self._echo(message)

    def success(self, message: str) -> None:
        self._echo(message, fg="green")

    def warning(self, message: str) -> None:
        self._echo(message, fg="yellow")

    def error(self, message: str) -> None:
        self._echo(f"Error: {message}", fg="red")


class RecordingNotifier:
    """Collect notices as (level, message) tuples."""

    def __init__(self):
        self.notices: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.notices.append(("info", message))

    def success(self, message: str) -> None:
        self.notices.append(("success", message))

    def warning(self, message: str) -> None:
        self.notices.append(("warning", message))

    def error(self, message: str) -> None:
        self.notices.append(("error", message))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m in self.notices if level is None or lvl == level]
