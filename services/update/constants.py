"""Constants shared across the update client modules."""

from __future__ import annotations

LOCAL_MANIFEST_ENV = "METADATAZERO_UPDATE_MANIFEST"
APPIMAGE_ENV = "APPIMAGE"

RESTART_FAILURE_ADVICE = "Please close and reopen the app manually to apply the update."

WINDOWS_INSTALLER_ARGS = ("/S",)

# minisign signature algorithms: legacy pure Ed25519 and BLAKE2b-prehashed.
SIGNATURE_ALGORITHM_PURE = b"Ed"
SIGNATURE_ALGORITHM_PREHASHED = b"ED"
