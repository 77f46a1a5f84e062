"""Client-side update cycle: check, download and install, then offer a restart."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from services.update.constants import RESTART_FAILURE_ADVICE
from services.update.models import AvailableUpdate, RelaunchError, UpdateError
from services.update.relaunch import MessageBoxNotifier, Notifier, ProcessRelauncher, Relauncher
from services.update.service import UpdateService
from services.update.state import UpdateSessionState, transition


_LOGGER = logging.getLogger(__name__)

StateListener = Callable[[UpdateSessionState], None]


class UpdateConsumer:
    """Owns the update session state for one running client.

    ``run_cycle`` always starts from ``NONE``, advances through
    ``DOWNLOADING`` to ``READY`` when an update installs, and falls back to
    ``NONE`` on any failure.  Failures are logged only; the single failure shown
    to the user is a restart that could not happen after a successful install.
    """

    def __init__(
        self,
        service: UpdateService,
        *,
        relauncher: Relauncher | None = None,
        notifier: Notifier | None = None,
        on_state_change: StateListener | None = None,
    ) -> None:
        self._service = service
        self._relauncher = relauncher or ProcessRelauncher()
        self._notifier = notifier or MessageBoxNotifier()
        self._on_state_change = on_state_change
        self._state = UpdateSessionState.NONE
        self._lock = threading.Lock()
        self._pending: AvailableUpdate | None = None

    @property
    def state(self) -> UpdateSessionState:
        return self._state

    @property
    def installed_update(self) -> AvailableUpdate | None:
        """The update installed by the last successful cycle, if any."""

        return self._pending if self._state is UpdateSessionState.READY else None

    def _move_to(self, target: UpdateSessionState) -> None:
        with self._lock:
            previous = self._state
            self._state = transition(previous, target)
        if previous is not target and self._on_state_change is not None:
            self._on_state_change(target)

    def run_cycle(self) -> UpdateSessionState:
        self._move_to(UpdateSessionState.NONE)
        self._pending = None
        try:
            update = self._service.check()
            if update is None:
                return self._state
            self._move_to(UpdateSessionState.DOWNLOADING)
            self._service.download_and_install(update)
            self._pending = update
            self._move_to(UpdateSessionState.READY)
        except UpdateError as exc:
            _LOGGER.warning("Automatic update failed: %s", exc)
            self._move_to(UpdateSessionState.NONE)
        except Exception:
            _LOGGER.exception("Unexpected error during update cycle")
            self._move_to(UpdateSessionState.NONE)
        return self._state

    def restart(self) -> bool:
        """Hand off to the relauncher; returns ``False`` if the restart failed."""

        if self._state is not UpdateSessionState.READY:
            _LOGGER.debug("Restart requested with no installed update")
            return False
        try:
            self._relauncher.relaunch()
        except RelaunchError as exc:
            _LOGGER.error("Restart after update failed: %s", exc)
            self._notifier.notify("Restart failed", RESTART_FAILURE_ADVICE)
            return False
        return True


__all__ = ["StateListener", "UpdateConsumer"]
