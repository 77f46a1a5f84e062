"""Metadata backend that shells out to the bundled ExifTool binary."""

from __future__ import annotations

import json
import logging
import os
import platform
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, Sequence

from app.preferences import PreservationOptions
from services.metadata.models import CleanResult, MetadataBackendError, MetadataInfo
from services.release.constants import EXIFTOOL_WINDOWS_TARGET

_LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = frozenset(
    {
        "3g2", "3gp2", "3gp", "3gpp", "aax", "ai", "ait", "arq", "arw", "avif", "cr2", "cr3",
        "crm", "crw", "ciff", "cs1", "dcp", "dng", "dr4", "dvb", "eps", "epsf", "ps", "erf",
        "exv", "f4a", "f4b", "f4p", "f4v", "fff", "flif", "gif", "gpr", "hdp", "wdp", "jxr",
        "heic", "heif", "iiq", "ind", "indd", "indt", "insp", "jp2", "jpf", "jpm", "jpx",
        "jpeg", "jpg", "jpe", "lrv", "m4a", "m4b", "m4p", "m4v", "mef", "mie", "mos", "mov",
        "qt", "mp4", "mpo", "mqv", "nef", "nrw", "orf", "pdf", "pef", "png", "jng", "mng",
        "ppm", "pbm", "pgm", "psd", "psb", "psdt", "qtif", "qti", "qif", "raf", "raw", "rw2",
        "rwl", "sr2", "srw", "thm", "tiff", "tif", "x3f", "webp",
    }
)

_TIFF_EXTENSIONS = {"tif", "tiff"}

Runner = Callable[..., "subprocess.CompletedProcess[bytes]"]


def exiftool_binary_name(system: str | None = None, machine: str | None = None) -> str:
    """Return the bundled executable name for the given (or running) platform."""

    system = (system if system is not None else sys.platform).lower()
    machine = (machine if machine is not None else platform.machine()).lower()
    arch = "aarch64" if machine in {"arm64", "aarch64"} else "x86_64"
    if system.startswith("win"):
        if arch != "x86_64":
            raise MetadataBackendError("Unsupported platform")
        return EXIFTOOL_WINDOWS_TARGET
    if system == "darwin":
        name = f"exiftool-{arch}-apple-darwin"
    elif system.startswith("linux"):
        name = f"exiftool-{arch}-unknown-linux-gnu"
    else:
        raise MetadataBackendError("Unsupported platform")
    return name


def is_supported_file(path: Path) -> bool:
    return path.suffix[1:].lower() in SUPPORTED_EXTENSIONS


def expand_paths(paths: Sequence[str]) -> list[str]:
    """Flatten files and directories into the supported files they name or contain.

    Directories are walked recursively without following symlinks; unsupported
    and missing paths are dropped.
    """

    expanded: list[str] = []
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            if is_supported_file(path):
                expanded.append(raw)
        elif path.is_dir():
            for root, dirnames, filenames in os.walk(path, followlinks=False):
                dirnames.sort()
                for filename in sorted(filenames):
                    candidate = Path(root) / filename
                    if candidate.is_file() and not candidate.is_symlink() and is_supported_file(candidate):
                        expanded.append(str(candidate))
    return expanded


def cleaned_output_path(path: Path) -> Path:
    """Return the ``<stem>_cleaned<suffix>`` sibling written when not backing up."""

    return path.with_name(f"{path.stem}_cleaned{path.suffix}")


def format_metadata_value(value: Any) -> str | None:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return ", ".join(item for item in value if isinstance(item, str))
    return None


def build_clean_arguments(
    path: Path,
    *,
    backup: bool,
    preservation: PreservationOptions,
) -> list[str]:
    arguments = ["-all="]
    if path.suffix[1:].lower() in _TIFF_EXTENSIONS:
        arguments.append("-CommonIFD0=")
    if preservation.orientation or preservation.color_profile:
        arguments.extend(["-tagsfromfile", "@"])
        if preservation.orientation:
            arguments.append("-Orientation")
        if preservation.color_profile:
            arguments.extend(["-ColorSpaceTags", "-ICCProfile"])
    if preservation.modification_date:
        arguments.append("-P")
    if not backup:
        arguments.extend(["-o", str(cleaned_output_path(path))])
    arguments.append(str(path))
    return arguments


class ExifToolBackend:
    """Read and clean metadata by running ExifTool as a subprocess."""

    def __init__(self, executable: Path, *, runner: Runner = subprocess.run) -> None:
        self._executable = Path(executable)
        self._runner = runner

    @classmethod
    def from_binaries_dir(cls, binaries_dir: Path) -> "ExifToolBackend":
        executable = binaries_dir / exiftool_binary_name()
        if not executable.exists():
            raise MetadataBackendError(f"ExifTool binary not found at: {executable}")
        return cls(executable)

    @property
    def executable(self) -> Path:
        return self._executable

    def expand_paths(self, paths: Sequence[str]) -> list[str]:
        return expand_paths(paths)

    def _run(self, arguments: Sequence[str]) -> "subprocess.CompletedProcess[bytes]":
        command = [str(self._executable), *arguments]
        _LOGGER.debug("Running %s", command)
        try:
            return self._runner(command, capture_output=True, check=False)
        except OSError as exc:
            raise MetadataBackendError(f"Failed to execute exiftool: {exc}") from exc

    def read_metadata(self, file_path: str) -> MetadataInfo:
        path = Path(file_path)
        try:
            size = path.stat().st_size
        except FileNotFoundError:
            raise MetadataBackendError(f"File not found: {file_path}") from None
        except OSError as exc:
            raise MetadataBackendError(f"Failed to read file metadata: {exc}") from exc

        completed = self._run(["-json", "-a", "-s", file_path])
        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace")
            raise MetadataBackendError(f"ExifTool error: {stderr}")
        try:
            documents = json.loads(completed.stdout.decode("utf-8", errors="replace"))
        except json.JSONDecodeError as exc:
            raise MetadataBackendError(f"Failed to parse ExifTool output: {exc}") from exc

        metadata: dict[str, str] = {}
        if isinstance(documents, list) and documents and isinstance(documents[0], dict):
            for key, value in documents[0].items():
                formatted = format_metadata_value(value)
                if formatted is not None:
                    metadata[key] = formatted
        return MetadataInfo(
            file_path=file_path,
            file_name=path.name,
            file_size=size,
            metadata=metadata,
        )

    def _finish_clean(
        self, file_path: str, output_path: Path, arguments: Sequence[str], success_message: str
    ) -> CleanResult:
        completed = self._run(arguments)
        success = completed.returncode == 0
        return CleanResult(
            success=success,
            file_path=file_path,
            output_path=str(output_path),
            message=success_message
            if success
            else completed.stderr.decode("utf-8", errors="replace"),
        )

    def clean_metadata(
        self,
        file_path: str,
        *,
        backup: bool = False,
        preservation: PreservationOptions = PreservationOptions(),
    ) -> CleanResult:
        path = Path(file_path)
        if not path.exists():
            raise MetadataBackendError(f"File not found: {file_path}")
        output_path = path if backup else cleaned_output_path(path)
        arguments = build_clean_arguments(path, backup=backup, preservation=preservation)
        return self._finish_clean(file_path, output_path, arguments, "Metadata cleaned successfully")

    def clean_selective(
        self,
        file_path: str,
        tags: Sequence[str],
        *,
        backup: bool = False,
        preserve_modification_date: bool = False,
    ) -> CleanResult:
        """Remove only ``tags`` from ``file_path``."""

        path = Path(file_path)
        if not path.exists():
            raise MetadataBackendError(f"File not found: {file_path}")
        output_path = path if backup else cleaned_output_path(path)
        arguments = [f"-{tag}=" for tag in tags]
        if preserve_modification_date:
            arguments.append("-P")
        if not backup:
            arguments.extend(["-o", str(output_path)])
        arguments.append(file_path)
        return self._finish_clean(
            file_path, output_path, arguments, f"Removed {len(tags)} metadata tags"
        )


__all__ = [
    "ExifToolBackend",
    "SUPPORTED_EXTENSIONS",
    "build_clean_arguments",
    "cleaned_output_path",
    "exiftool_binary_name",
    "expand_paths",
    "format_metadata_value",
    "is_supported_file",
]
