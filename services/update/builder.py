"""Helpers for constructing and scheduling the update consumer."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable

from app.config import ReleaseConfig, get_release_config
from app.preferences import Preferences
from app.version import get_app_version
from services.update.constants import LOCAL_MANIFEST_ENV
from services.update.consumer import StateListener, UpdateConsumer
from services.update.installers import Installer, select_installer
from services.update.providers import (
    HttpManifestProvider,
    LocalManifestProvider,
    ManifestProvider,
    current_platform_id,
)
from services.update.relaunch import Notifier, Relauncher
from services.update.service import UpdateService


_LOGGER = logging.getLogger(__name__)


def _build_provider(config: ReleaseConfig) -> ManifestProvider:
    local_manifest = os.environ.get(LOCAL_MANIFEST_ENV)
    if local_manifest:
        path = Path(local_manifest)
        if path.exists():
            _LOGGER.info("Using local update manifest at %s", path)
            return LocalManifestProvider(path)
        _LOGGER.warning("Configured local update manifest does not exist: %s", path)
    return HttpManifestProvider(config.updater.endpoint)


def build_update_service(
    installer: Installer | None = None,
    *,
    config: ReleaseConfig | None = None,
    platform_id: str | None = None,
) -> UpdateService | None:
    """Construct an :class:`UpdateService` for the current environment."""

    platform_id = platform_id or current_platform_id()
    if platform_id is None:
        _LOGGER.debug("Skipping update service build on unsupported platform")
        return None

    installer = installer or select_installer()
    if installer is None:
        _LOGGER.debug("No installer available for %s", platform_id)
        return None

    config = config or get_release_config()
    return UpdateService(
        _build_provider(config),
        installer,
        current_version=get_app_version(),
        platform_id=platform_id,
        public_key=config.updater.pubkey,
    )


def build_update_consumer(
    *,
    service: UpdateService | None = None,
    relauncher: Relauncher | None = None,
    notifier: Notifier | None = None,
    on_state_change: StateListener | None = None,
) -> UpdateConsumer | None:
    service = service or build_update_service()
    if service is None:
        return None
    return UpdateConsumer(
        service,
        relauncher=relauncher,
        notifier=notifier,
        on_state_change=on_state_change,
    )


def _run_update_cycle(
    consumer: UpdateConsumer, on_complete: Callable[[], None] | None
) -> None:
    try:
        consumer.run_cycle()
    finally:
        if on_complete:
            on_complete()


def schedule_startup_update_check(
    consumer: UpdateConsumer | None,
    preferences: Preferences,
    *,
    on_complete: Callable[[], None] | None = None,
) -> threading.Thread | None:
    """Run one update cycle in the background if the user allows automatic updates."""

    if not preferences.auto_update:
        _LOGGER.debug("Automatic updates disabled by user preference")
        return None
    if consumer is None:
        return None

    thread = threading.Thread(
        target=_run_update_cycle,
        args=(consumer, on_complete),
        name="metadatazero-update",
        daemon=True,
    )
    thread.start()
    return thread


__all__ = [
    "build_update_consumer",
    "build_update_service",
    "schedule_startup_update_check",
]
