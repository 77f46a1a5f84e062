"""Acquire the pinned ExifTool bundle and lay it out for every platform.

The UNIX tarball ships a single Perl script; the same bytes are copied under
each architecture-specific name the application looks up at runtime.  The
Windows zip ships a launcher executable plus its ``exiftool_files`` resource
directory inside a versioned sub-directory.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from enum import Enum
from pathlib import Path

from services.release import constants
from services.release.archive import extract_archive
from services.release.downloads import Downloader, UrllibDownloader
from services.release.hashing import verify_sha256
from services.release.models import PinnedDependency, ReleaseError
from services.release.probe import probe_file

_LOGGER = logging.getLogger(__name__)


class FetchOutcome(str, Enum):
    SATISFIED = "satisfied"
    FETCHED = "fetched"


def pinned_exiftool(binaries_root: Path) -> PinnedDependency:
    return PinnedDependency(
        name="exiftool",
        version=constants.EXIFTOOL_VERSION,
        expected_hashes={
            constants.UNIX_FAMILY: constants.EXIFTOOL_UNIX_SHA256,
            constants.WINDOWS_FAMILY: constants.EXIFTOOL_WINDOWS_SHA256,
        },
        binaries_root=binaries_root,
    )


def _make_tree_writable(root: Path) -> None:
    for directory, dirnames, filenames in os.walk(root):
        for name in [*dirnames, *filenames]:
            path = Path(directory) / name
            if path.is_symlink():
                continue
            mode = path.stat().st_mode
            path.chmod(mode | stat.S_IWUSR)


def _remove_tree(root: Path) -> None:
    if not root.exists():
        return
    _make_tree_writable(root)
    shutil.rmtree(root)


def _replace_tree(source: Path, destination: Path) -> None:
    """Replace ``destination`` with a copy of ``source`` (remove, then copy)."""

    _remove_tree(destination)
    shutil.copytree(source, destination)
    _make_tree_writable(destination)


class DependencyFetcher:
    """Ensure the normalized binaries layout exists under ``binaries_root``."""

    def __init__(
        self,
        dependency: PinnedDependency,
        *,
        downloader: Downloader | None = None,
    ) -> None:
        self._dependency = dependency
        self._downloader = downloader or UrllibDownloader()

    @property
    def root(self) -> Path:
        return self._dependency.binaries_root

    def required_paths(self) -> list[Path]:
        names = [
            *constants.EXIFTOOL_UNIX_TARGETS,
            constants.EXIFTOOL_WINDOWS_TARGET,
            constants.SHARED_LIB_DIR,
            constants.SHARED_WINDOWS_FILES_DIR,
        ]
        return [self.root / name for name in names]

    def is_satisfied(self) -> bool:
        return all(path.exists() for path in self.required_paths())

    def ensure(self) -> FetchOutcome:
        """Download, verify and install the bundle unless it is already in place.

        An existing complete layout is never touched.  On failure, paths this
        run created are removed again and the error propagates.
        """

        self.root.mkdir(parents=True, exist_ok=True)
        if self.is_satisfied():
            _LOGGER.info("%s binaries already configured", self._dependency.name)
            return FetchOutcome.SATISFIED

        preexisting = {path for path in self.required_paths() if path.exists()}
        try:
            self._fetch_unix()
            self._fetch_windows()
        except BaseException:
            self._rollback(preexisting)
            raise
        return FetchOutcome.FETCHED

    def _rollback(self, preexisting: set[Path]) -> None:
        for path in self.required_paths():
            if path in preexisting or not path.exists():
                continue
            _LOGGER.debug("Removing partially installed %s", path)
            if path.is_dir():
                _remove_tree(path)
            else:
                path.unlink(missing_ok=True)

    def _acquire(self, url: str, archive_name: str, family: str, scratch: Path) -> Path:
        """Download ``url``, verify it against its pinned digest, then extract it."""

        expected = self._dependency.expected_hash(family)
        archive = self.root / archive_name
        try:
            self._downloader.download(url, archive)
            verify_sha256(archive, expected)
            return extract_archive(archive, scratch)
        finally:
            archive.unlink(missing_ok=True)

    def _fetch_unix(self) -> None:
        version = self._dependency.version
        _LOGGER.info("Downloading %s %s...", self._dependency.name, version)
        scratch = Path(tempfile.mkdtemp(prefix=".exiftool-unix-", dir=self.root))
        try:
            extracted = self._acquire(
                constants.EXIFTOOL_UNIX_URL.format(version=version),
                "exiftool.tar.gz",
                constants.UNIX_FAMILY,
                scratch,
            )
            source_dir = extracted / f"exiftool-{version}"
            executable = probe_file(source_dir / "exiftool").require()

            for name in constants.EXIFTOOL_UNIX_TARGETS:
                destination = self.root / name
                shutil.copyfile(executable, destination)
                destination.chmod(0o755)
                _LOGGER.debug("Installed %s", destination)

            library = source_dir / constants.SHARED_LIB_DIR
            if not library.is_dir():
                raise ReleaseError("Archive did not contain the ExifTool library directory")
            _replace_tree(library, self.root / constants.SHARED_LIB_DIR)
        finally:
            _remove_tree(scratch)
        _LOGGER.info("%s %s Unix binaries configured", self._dependency.name, version)

    def _fetch_windows(self) -> None:
        version = self._dependency.version
        _LOGGER.info("Downloading %s %s for Windows...", self._dependency.name, version)
        scratch = Path(tempfile.mkdtemp(prefix=".exiftool-windows-", dir=self.root))
        try:
            extracted = self._acquire(
                constants.EXIFTOOL_WINDOWS_URL.format(version=version),
                "exiftool-windows.zip",
                constants.WINDOWS_FAMILY,
                scratch,
            )
            base_dir = extracted / f"exiftool-{version}_64"
            executable = probe_file(base_dir / constants.EXIFTOOL_WINDOWS_EXTRACTED_NAME).require()
            os.replace(executable, self.root / constants.EXIFTOOL_WINDOWS_TARGET)

            resources = base_dir / constants.SHARED_WINDOWS_FILES_DIR
            if resources.is_dir():
                _replace_tree(resources, self.root / constants.SHARED_WINDOWS_FILES_DIR)
            else:
                _LOGGER.warning("Windows archive has no %s directory", resources.name)
        finally:
            _remove_tree(scratch)
        _LOGGER.info("%s Windows binary downloaded and configured", self._dependency.name)


__all__ = ["DependencyFetcher", "FetchOutcome", "pinned_exiftool"]
