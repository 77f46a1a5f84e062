"""Data models shared by the file session and metadata backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping


class MetadataBackendError(RuntimeError):
    """Raised by a metadata backend; the message is shown to the user as-is."""


@dataclass(frozen=True)
class MetadataInfo:
    file_path: str
    file_name: str
    file_size: int
    metadata: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CleanResult:
    success: bool
    file_path: str
    output_path: str
    message: str


@dataclass(frozen=True)
class FileRecord:
    """One accepted input file and its place in the read/clean pipeline."""

    path: str
    name: str
    size: int = 0
    metadata: Mapping[str, str] | None = None
    cleaned: bool = False
    processing: bool = False
    metadata_error: str | None = None
    metadata_loading: bool = False

    @classmethod
    def pending(cls, path: str) -> "FileRecord":
        return cls(path=path, name=Path(path).name or path, metadata_loading=True)


__all__ = ["CleanResult", "FileRecord", "MetadataBackendError", "MetadataInfo"]
