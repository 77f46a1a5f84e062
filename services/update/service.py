"""Service responsible for discovering and installing updates."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Callable

from services.update.installers import Installer
from services.update.models import AvailableUpdate, UpdateError
from services.update.providers import ManifestProvider
from services.update.release_assets import download_update_package
from services.update.signature import verify_file_signature
from services.update.versioning import is_version_newer


_LOGGER = logging.getLogger(__name__)

PackageDownloader = Callable[[AvailableUpdate, Path], Path]
SignatureVerifier = Callable[[Path, str, str], None]


class UpdateService:
    """Coordinate manifest checks, download, verification and installation."""

    def __init__(
        self,
        provider: ManifestProvider,
        installer: Installer,
        *,
        current_version: str,
        platform_id: str,
        public_key: str,
        downloader: PackageDownloader = download_update_package,
        verifier: SignatureVerifier = verify_file_signature,
    ) -> None:
        self._provider = provider
        self._installer = installer
        self._current_version = current_version
        self._platform_id = platform_id
        self._public_key = public_key
        self._downloader = downloader
        self._verifier = verifier

    @property
    def current_version(self) -> str:
        return self._current_version

    def check(self) -> AvailableUpdate | None:
        """Return the update to install, or ``None`` when already current."""

        manifest = self._provider.fetch_manifest()
        if not is_version_newer(self._current_version, manifest.version):
            _LOGGER.debug("Current version %s is up to date", self._current_version)
            return None

        release = manifest.platforms.get(self._platform_id)
        if release is None:
            _LOGGER.info(
                "Version %s is available but has no package for %s",
                manifest.version,
                self._platform_id,
            )
            return None

        _LOGGER.info("Update available: %s -> %s", self._current_version, manifest.version)
        return AvailableUpdate(
            current_version=self._current_version,
            version=manifest.version,
            platform_id=self._platform_id,
            url=release.url,
            signature=release.signature,
            notes=manifest.notes,
        )

    def download_and_install(self, update: AvailableUpdate) -> None:
        """Download ``update``, verify its signature and install it."""

        with tempfile.TemporaryDirectory(prefix="metadatazero-update-") as scratch:
            package = self._downloader(update, Path(scratch))
            if not package.is_file():
                raise UpdateError(f"Downloaded package is missing: {package}")
            self._verifier(package, update.signature, self._public_key)
            self._installer.install(package, update.version)
        _LOGGER.info("Installed version %s", update.version)


__all__ = ["PackageDownloader", "SignatureVerifier", "UpdateService"]
