"""Interactive console front-end for ``tickdown run``.

Reads one command per line from stdin without blocking the Qt event loop
and echoes the live remaining time.
"""

from __future__ import annotations

import sys

import click
from PyQt6.QtCore import QCoreApplication, QObject, QSocketNotifier

from .commands import CommandKind, InvalidCommandError, parse_command
from .notify.notifier import Notification, format_remaining
from .service import TimerService
from .timer.controller import TimerState

PROMPT_HELP = "commands: start [MIN] | stop | resume | reset | recover | dismiss | status | quit"


def echo_notification(notification: Notification) -> None:
    """Notification sink that prints to the terminal."""
    click.echo()
    click.secho(f"{notification.title}: ", bold=True, nl=False)
    click.echo(notification.body.replace("\n", " / "))


class ConsoleSession(QObject):
    def __init__(self, service: TimerService, app: QCoreApplication, stream=None) -> None:
        super().__init__(app)
        self._service = service
        self._app = app
        self._stream = stream or sys.stdin

        self._notifier = QSocketNotifier(
            self._stream.fileno(), QSocketNotifier.Type.Read, self,
        )
        self._notifier.activated.connect(self._on_stdin_ready)

        service.controller.subscribe(self._show_remaining)
        service.controller.state_changed.connect(self._show_state)

    def _show_remaining(self, remaining: int) -> None:
        if self._service.controller.state == TimerState.RUNNING:
            click.echo(f"\r{format_remaining(remaining)} ", nl=False)

    def _show_state(self, state: TimerState) -> None:
        click.echo(f"\n[{state.value}] {format_remaining(self._service.controller.remaining)}")

    def _on_stdin_ready(self, *_args) -> None:
        line = self._stream.readline()
        if not line:
            # EOF: behave like quit
            self._notifier.setEnabled(False)
            self._app.quit()
            return
        if not line.strip():
            return
        try:
            command = parse_command(line)
        except InvalidCommandError as exc:
            click.echo(f"error: {exc}", err=True)
            click.echo(PROMPT_HELP, err=True)
            return

        if command.kind == CommandKind.QUIT:
            self._app.quit()
            return
        if command.kind == CommandKind.STATUS:
            controller = self._service.controller
            click.echo(
                f"{controller.state.value} {format_remaining(controller.remaining)}"
            )
            return
        if not self._service.dispatch(command):
            click.echo(f"({command.kind.value} ignored in state {self._service.controller.state.value})")
