"""Public API for the update client package."""

from __future__ import annotations

from services.update.builder import (
    build_update_consumer,
    build_update_service,
    schedule_startup_update_check,
)
from services.update.consumer import UpdateConsumer
from services.update.constants import LOCAL_MANIFEST_ENV, RESTART_FAILURE_ADVICE
from services.update.installers import (
    AppImageInstaller,
    Installer,
    MacAppInstaller,
    WindowsInstaller,
    select_installer,
)
from services.update.models import (
    AvailableUpdate,
    PlatformRelease,
    RelaunchError,
    SignatureError,
    UpdateError,
    UpdateManifest,
)
from services.update.providers import (
    HttpManifestProvider,
    LocalManifestProvider,
    ManifestProvider,
    current_platform_id,
)
from services.update.relaunch import (
    LoggingNotifier,
    MessageBoxNotifier,
    Notifier,
    ProcessRelauncher,
    Relauncher,
)
from services.update.service import UpdateService
from services.update.signature import verify_file_signature
from services.update.state import InvalidTransition, UpdateSessionState, transition
from services.update.versioning import compare_versions, is_version_newer

__all__ = [
    "LOCAL_MANIFEST_ENV",
    "RESTART_FAILURE_ADVICE",
    "AppImageInstaller",
    "AvailableUpdate",
    "HttpManifestProvider",
    "Installer",
    "InvalidTransition",
    "LocalManifestProvider",
    "LoggingNotifier",
    "MacAppInstaller",
    "ManifestProvider",
    "MessageBoxNotifier",
    "Notifier",
    "PlatformRelease",
    "ProcessRelauncher",
    "RelaunchError",
    "Relauncher",
    "SignatureError",
    "UpdateConsumer",
    "UpdateError",
    "UpdateManifest",
    "UpdateService",
    "UpdateSessionState",
    "WindowsInstaller",
    "build_update_consumer",
    "build_update_service",
    "compare_versions",
    "current_platform_id",
    "is_version_newer",
    "schedule_startup_update_check",
    "select_installer",
    "transition",
    "verify_file_signature",
]
