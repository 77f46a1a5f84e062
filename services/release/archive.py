"""Bounded extraction of downloaded zip and tar archives."""

from __future__ import annotations

import logging
import shutil
import tarfile
import zipfile
from pathlib import Path

from services.release import constants
from services.release.models import ReleaseError

_LOGGER = logging.getLogger(__name__)


class ArchiveError(ReleaseError):
    """Raised when an archive is unreadable or exceeds the extraction limits."""


def extract_archive(archive_path: Path, target_dir: Path) -> Path:
    """Extract ``archive_path`` into ``target_dir`` based on its file name."""

    _LOGGER.info("Extracting %s", archive_path.name)
    target_dir.mkdir(parents=True, exist_ok=True)
    name = archive_path.name.lower()
    try:
        if name.endswith((".tar.gz", ".tgz", ".tar")):
            with tarfile.open(archive_path, "r:*") as archive:
                extract_tar_safely(archive, target_dir)
        else:
            with zipfile.ZipFile(archive_path) as archive:
                extract_zip_safely(archive, target_dir)
    except (OSError, zipfile.BadZipFile, tarfile.TarError) as exc:
        raise ArchiveError(f"Failed to extract {archive_path.name}: {exc}") from exc
    _LOGGER.debug("Archive extracted to %s", target_dir)
    return target_dir


def _safe_destination(root: Path, name: str) -> Path:
    path = Path(name)
    if path.is_absolute() or name.startswith(("/", "\\")):
        raise ArchiveError(f"Archive contained an absolute path entry: {name}")
    destination = (root / path).resolve()
    try:
        destination.relative_to(root)
    except ValueError:
        raise ArchiveError(f"Archive contained an unsafe relative path: {name}") from None
    return destination


class _Budget:
    def __init__(self) -> None:
        self.entries = 0
        self.total_bytes = 0

    def charge_entry(self) -> None:
        self.entries += 1
        if self.entries > constants.MAX_ARCHIVE_ENTRIES:
            _LOGGER.error(
                "Archive entry count %s exceeded limit %s",
                self.entries,
                constants.MAX_ARCHIVE_ENTRIES,
            )
            raise ArchiveError("Archive contained too many entries")

    def charge_file(self, name: str, size: int) -> None:
        if size > constants.MAX_ARCHIVE_FILE_SIZE:
            _LOGGER.error(
                "Archive member %s exceeded file size limit (%s > %s)",
                name,
                size,
                constants.MAX_ARCHIVE_FILE_SIZE,
            )
            raise ArchiveError("Archive contained an oversized file")
        self.total_bytes += size
        if self.total_bytes > constants.MAX_ARCHIVE_TOTAL_BYTES:
            _LOGGER.error(
                "Archive expanded to %s bytes which exceeds limit %s",
                self.total_bytes,
                constants.MAX_ARCHIVE_TOTAL_BYTES,
            )
            raise ArchiveError("Archive expanded beyond safe limits")


def extract_zip_safely(archive: zipfile.ZipFile, target_dir: Path) -> None:
    root = target_dir.resolve()
    budget = _Budget()
    for member in archive.infolist():
        name = member.filename
        if not name:
            continue
        budget.charge_entry()
        destination = _safe_destination(root, name)
        if member.is_dir():
            destination.mkdir(parents=True, exist_ok=True)
            continue
        if member.compress_size == 0 and member.file_size > 0:
            _LOGGER.error("Archive member %s reported zero compression size", name)
            raise ArchiveError("Archive contained a suspiciously compressed file")
        if (
            member.compress_size > 0
            and member.file_size > member.compress_size * constants.MAX_COMPRESSION_RATIO
        ):
            _LOGGER.error(
                "Archive member %s exceeded compression ratio limit (%s > %s)",
                name,
                member.file_size,
                member.compress_size * constants.MAX_COMPRESSION_RATIO,
            )
            raise ArchiveError("Archive exceeded safe compression ratio")
        budget.charge_file(name, member.file_size)
        destination.parent.mkdir(parents=True, exist_ok=True)
        with archive.open(member) as source, destination.open("wb") as target:
            shutil.copyfileobj(source, target)

    _LOGGER.info(
        "Extracted %s entries totalling %s bytes", budget.entries, budget.total_bytes
    )


def extract_tar_safely(archive: tarfile.TarFile, target_dir: Path) -> None:
    root = target_dir.resolve()
    budget = _Budget()
    for member in archive.getmembers():
        name = member.name
        if not name:
            continue
        budget.charge_entry()
        destination = _safe_destination(root, name)
        if member.isdir():
            destination.mkdir(parents=True, exist_ok=True)
            continue
        if not member.isfile():
            _LOGGER.debug("Skipping non-regular archive member %s", name)
            continue
        budget.charge_file(name, member.size)
        source = archive.extractfile(member)
        if source is None:
            continue
        destination.parent.mkdir(parents=True, exist_ok=True)
        with source, destination.open("wb") as target:
            shutil.copyfileobj(source, target)
        if member.mode & 0o111:
            destination.chmod(0o755)

    _LOGGER.info(
        "Extracted %s entries totalling %s bytes", budget.entries, budget.total_bytes
    )


__all__ = ["ArchiveError", "extract_archive", "extract_tar_safely", "extract_zip_safely"]
