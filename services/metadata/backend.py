"""Boundary between the file session and whatever reads and rewrites metadata."""

from __future__ import annotations

from typing import Protocol, Sequence

from app.preferences import PreservationOptions
from services.metadata.models import CleanResult, MetadataInfo


class MetadataBackend(Protocol):
    """Operations may raise :class:`~services.metadata.models.MetadataBackendError`."""

    def expand_paths(self, paths: Sequence[str]) -> list[str]:
        """Flatten files and directories into the supported files they contain."""

    def read_metadata(self, file_path: str) -> MetadataInfo:
        """Return the file's name, size and tag mapping."""

    def clean_metadata(
        self,
        file_path: str,
        *,
        backup: bool,
        preservation: PreservationOptions,
    ) -> CleanResult:
        """Strip metadata from ``file_path``, keeping what ``preservation`` asks for."""


__all__ = ["MetadataBackend"]
