from __future__ import annotations

import pytest

from services.update.constants import RESTART_FAILURE_ADVICE
from services.update.consumer import UpdateConsumer
from services.update.models import RelaunchError, UpdateError
from services.update.service import UpdateService
from services.update.state import InvalidTransition, UpdateSessionState, transition
from tests.unit.update_test_utils import (
    PayloadDownloader,
    RecordingInstaller,
    StaticManifestProvider,
    accept_any_signature,
    manifest_for,
)


class RecordingRelauncher:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self._error = error

    def relaunch(self) -> None:
        self.calls += 1
        if self._error is not None:
            raise self._error


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def notify(self, title: str, message: str) -> None:
        self.messages.append((title, message))


def _consumer(
    provider: StaticManifestProvider,
    *,
    installer: RecordingInstaller | None = None,
    downloader: PayloadDownloader | None = None,
    relauncher: RecordingRelauncher | None = None,
    notifier: RecordingNotifier | None = None,
    states: list[UpdateSessionState] | None = None,
) -> UpdateConsumer:
    service = UpdateService(
        provider,
        installer or RecordingInstaller(),
        current_version="1.0.0",
        platform_id="linux-x86_64",
        public_key="key",
        downloader=downloader or PayloadDownloader(),
        verifier=accept_any_signature,
    )
    return UpdateConsumer(
        service,
        relauncher=relauncher or RecordingRelauncher(),
        notifier=notifier or RecordingNotifier(),
        on_state_change=states.append if states is not None else None,
    )


class TestTransition:
    def test_cycle_advances_in_order(self) -> None:
        state = transition(UpdateSessionState.NONE, UpdateSessionState.DOWNLOADING)
        assert transition(state, UpdateSessionState.READY) is UpdateSessionState.READY

    @pytest.mark.parametrize("current", list(UpdateSessionState))
    def test_any_state_can_reset(self, current: UpdateSessionState) -> None:
        assert transition(current, UpdateSessionState.NONE) is UpdateSessionState.NONE

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (UpdateSessionState.NONE, UpdateSessionState.READY),
            (UpdateSessionState.READY, UpdateSessionState.DOWNLOADING),
            (UpdateSessionState.DOWNLOADING, UpdateSessionState.DOWNLOADING),
        ],
    )
    def test_skipping_steps_is_rejected(self, current: UpdateSessionState, target: UpdateSessionState) -> None:
        with pytest.raises(InvalidTransition):
            transition(current, target)


def test_successful_cycle_passes_through_downloading() -> None:
    states: list[UpdateSessionState] = []
    installer = RecordingInstaller()
    consumer = _consumer(StaticManifestProvider(manifest_for("1.1.0")), installer=installer, states=states)

    assert consumer.run_cycle() is UpdateSessionState.READY

    assert states == [UpdateSessionState.DOWNLOADING, UpdateSessionState.READY]
    assert installer.installed == [(b"package-bytes", "1.1.0")]
    assert consumer.installed_update is not None
    assert consumer.installed_update.version == "1.1.0"


def test_up_to_date_client_stays_idle() -> None:
    states: list[UpdateSessionState] = []
    consumer = _consumer(StaticManifestProvider(manifest_for("1.0.0")), states=states)

    assert consumer.run_cycle() is UpdateSessionState.NONE
    assert states == []


def test_check_failure_is_logged_only(caplog: pytest.LogCaptureFixture) -> None:
    notifier = RecordingNotifier()
    consumer = _consumer(StaticManifestProvider(error=UpdateError("offline")), notifier=notifier)

    with caplog.at_level("WARNING"):
        assert consumer.run_cycle() is UpdateSessionState.NONE

    assert "Automatic update failed: offline" in caplog.text
    assert notifier.messages == []


@pytest.mark.parametrize(
    "failure",
    [UpdateError("download failed"), RuntimeError("unexpected"), OSError("disk full")],
)
def test_download_failure_never_leaves_downloading(failure: Exception) -> None:
    states: list[UpdateSessionState] = []
    consumer = _consumer(
        StaticManifestProvider(manifest_for("1.1.0")),
        downloader=PayloadDownloader(error=failure),
        states=states,
    )

    assert consumer.run_cycle() is UpdateSessionState.NONE
    assert states == [UpdateSessionState.DOWNLOADING, UpdateSessionState.NONE]
    assert consumer.installed_update is None


def test_install_failure_resets_state() -> None:
    consumer = _consumer(
        StaticManifestProvider(manifest_for("1.1.0")),
        installer=RecordingInstaller(error=UpdateError("read-only volume")),
    )

    assert consumer.run_cycle() is UpdateSessionState.NONE


def test_new_cycle_starts_from_none() -> None:
    states: list[UpdateSessionState] = []
    provider = StaticManifestProvider(manifest_for("1.1.0"))
    consumer = _consumer(provider, states=states)
    consumer.run_cycle()

    provider.manifest = manifest_for("1.0.0")
    assert consumer.run_cycle() is UpdateSessionState.NONE

    assert states == [
        UpdateSessionState.DOWNLOADING,
        UpdateSessionState.READY,
        UpdateSessionState.NONE,
    ]


def test_restart_hands_off_to_relauncher() -> None:
    relauncher = RecordingRelauncher()
    consumer = _consumer(StaticManifestProvider(manifest_for("1.1.0")), relauncher=relauncher)
    consumer.run_cycle()

    assert consumer.restart() is True
    assert relauncher.calls == 1


def test_restart_without_installed_update_does_nothing() -> None:
    relauncher = RecordingRelauncher()
    consumer = _consumer(StaticManifestProvider(manifest_for("1.0.0")), relauncher=relauncher)

    assert consumer.restart() is False
    assert relauncher.calls == 0


def test_failed_restart_tells_user_to_restart_manually() -> None:
    notifier = RecordingNotifier()
    consumer = _consumer(
        StaticManifestProvider(manifest_for("1.1.0")),
        relauncher=RecordingRelauncher(RelaunchError("exec failed")),
        notifier=notifier,
    )
    consumer.run_cycle()

    assert consumer.restart() is False
    assert notifier.messages == [("Restart failed", RESTART_FAILURE_ADVICE)]
    assert RESTART_FAILURE_ADVICE == "Please close and reopen the app manually to apply the update."
