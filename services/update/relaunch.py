"""Restarting the application after an update and telling the user when that fails."""

from __future__ import annotations

import logging
import os
import sys
from typing import Callable, Protocol, Sequence

from services.update.constants import APPIMAGE_ENV
from services.update.models import RelaunchError

_LOGGER = logging.getLogger(__name__)


class Relauncher(Protocol):
    def relaunch(self) -> None:
        """Replace the running process with the freshly installed application."""


class Notifier(Protocol):
    def notify(self, title: str, message: str) -> None:
        """Show ``message`` to the user."""


class ProcessRelauncher:
    """Re-execute the running application in place."""

    def __init__(
        self,
        executable: str | None = None,
        arguments: Sequence[str] | None = None,
        *,
        execv: Callable[[str, Sequence[str]], object] = os.execv,
    ) -> None:
        self._executable = executable
        self._arguments = arguments
        self._execv = execv

    def command(self) -> list[str]:
        if self._executable is not None:
            executable = self._executable
        else:
            executable = os.environ.get(APPIMAGE_ENV) or sys.executable
        if self._arguments is not None:
            arguments = list(self._arguments)
        elif getattr(sys, "frozen", False) or executable != sys.executable:
            arguments = sys.argv[1:]
        else:
            arguments = list(sys.argv)
        return [executable, *arguments]

    def relaunch(self) -> None:
        command = self.command()
        _LOGGER.info("Restarting application: %s", command[0])
        for handler in logging.getLogger().handlers:
            handler.flush()
        try:
            self._execv(command[0], command)
        except OSError as exc:
            raise RelaunchError(f"Failed to restart application: {exc}") from exc


class LoggingNotifier:
    def notify(self, title: str, message: str) -> None:
        _LOGGER.warning("%s: %s", title, message)


class MessageBoxNotifier:
    """Show a native message box, logging instead when no display is available."""

    def notify(self, title: str, message: str) -> None:
        try:
            import tkinter
            from tkinter import messagebox
        except ImportError:
            LoggingNotifier().notify(title, message)
            return

        try:
            root = tkinter.Tk()
        except tkinter.TclError:
            LoggingNotifier().notify(title, message)
            return
        try:
            root.withdraw()
            messagebox.showwarning(title, message, parent=root)
        finally:
            root.destroy()


__all__ = [
    "LoggingNotifier",
    "MessageBoxNotifier",
    "Notifier",
    "ProcessRelauncher",
    "Relauncher",
]
