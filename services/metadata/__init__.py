"""Client-side file session backed by an opaque metadata backend."""

from __future__ import annotations

from services.metadata.backend import MetadataBackend
from services.metadata.models import CleanResult, FileRecord, MetadataBackendError, MetadataInfo
from services.metadata.session import FileSession, SessionListener

__all__ = [
    "CleanResult",
    "FileRecord",
    "FileSession",
    "MetadataBackend",
    "MetadataBackendError",
    "MetadataInfo",
    "SessionListener",
]
