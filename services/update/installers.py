"""Installer implementations for platform-specific behaviour."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Any, Protocol

from services.release.archive import ArchiveError, extract_archive
from services.update.constants import APPIMAGE_ENV, WINDOWS_INSTALLER_ARGS
from services.update.models import UpdateError

_LOGGER = logging.getLogger(__name__)


class Installer(Protocol):
    """Protocol describing the platform-specific installation routine."""

    def install(self, package: Path, version: str) -> None:
        """Put the verified ``package`` in place of the running application."""


class WindowsInstaller:
    """Run the downloaded NSIS installer silently and wait for it to finish."""

    def install(self, package: Path, version: str) -> None:
        _LOGGER.info("Running installer for version %s", version)
        popen_kwargs: dict[str, Any] = {
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
        }
        creationflags = getattr(subprocess, "CREATE_NO_WINDOW", 0)
        if creationflags:  # pragma: no cover - Windows only
            popen_kwargs["creationflags"] = creationflags
        try:
            completed = subprocess.run(
                [str(package), *WINDOWS_INSTALLER_ARGS], check=False, **popen_kwargs
            )
        except OSError as exc:
            raise UpdateError(f"Failed to launch installer: {exc}") from exc
        if completed.returncode != 0:
            raise UpdateError(f"Installer exited with status {completed.returncode}")


class AppImageInstaller:
    """Replace the running AppImage with the downloaded one."""

    def __init__(self, target: Path | None = None) -> None:
        self._target = target

    def _resolve_target(self) -> Path:
        if self._target is not None:
            return self._target
        appimage = os.environ.get(APPIMAGE_ENV)
        if not appimage:
            raise UpdateError("Not running from an AppImage; cannot self-update")
        return Path(appimage)

    def install(self, package: Path, version: str) -> None:
        target = self._resolve_target()
        _LOGGER.info("Replacing %s with version %s", target, version)
        staged = target.with_name(f".{target.name}.update")
        try:
            shutil.copyfile(package, staged)
            staged.chmod(0o755)
            os.replace(staged, target)
        except OSError as exc:
            staged.unlink(missing_ok=True)
            raise UpdateError(f"Failed to replace AppImage: {exc}") from exc


class MacAppInstaller:
    """Extract the ``.app.tar.gz`` package over the running application bundle."""

    def __init__(self, target: Path | None = None) -> None:
        self._target = target

    def _resolve_target(self) -> Path:
        if self._target is not None:
            return self._target
        for parent in Path(sys.executable).resolve().parents:
            if parent.suffix == ".app":
                return parent
        raise UpdateError("Not running from an application bundle; cannot self-update")

    def install(self, package: Path, version: str) -> None:
        target = self._resolve_target()
        scratch = Path(tempfile.mkdtemp(prefix="metadatazero-app-", dir=str(target.parent)))
        try:
            try:
                extract_archive(package, scratch)
            except ArchiveError as exc:
                raise UpdateError(f"Failed to extract update package: {exc}") from exc
            bundles = sorted(scratch.glob("*.app"))
            if not bundles:
                raise UpdateError("Update package does not contain an application bundle")
            _LOGGER.info("Replacing %s with version %s", target, version)
            self._swap_bundle(bundles[0], target)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)

    @staticmethod
    def _swap_bundle(bundle: Path, target: Path) -> None:
        """Move ``bundle`` to ``target``, restoring the previous bundle on failure."""

        backup = target.with_name(f"{target.name}.backup")
        if backup.exists():
            shutil.rmtree(backup, ignore_errors=True)
        try:
            if target.exists():
                os.rename(target, backup)
        except OSError as exc:
            raise UpdateError(f"Failed to set aside application bundle: {exc}") from exc

        try:
            shutil.move(str(bundle), str(target))
        except OSError as exc:
            _LOGGER.error("Failed to install new bundle, restoring %s", target)
            if target.exists():
                shutil.rmtree(target, ignore_errors=True)
            if backup.exists():
                os.rename(backup, target)
            raise UpdateError(f"Failed to replace application bundle: {exc}") from exc

        shutil.rmtree(backup, ignore_errors=True)


def select_installer(system: str | None = None) -> Installer | None:
    """Return the installer for ``system`` (defaults to this process)."""

    system = (system or sys.platform).lower()
    if system.startswith("win"):
        return WindowsInstaller()
    if system == "darwin":
        return MacAppInstaller()
    if system.startswith("linux"):
        return AppImageInstaller()
    return None


__all__ = [
    "AppImageInstaller",
    "Installer",
    "MacAppInstaller",
    "WindowsInstaller",
    "select_installer",
]
