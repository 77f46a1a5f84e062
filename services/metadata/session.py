"""Ordered, one-file-at-a-time processing of the client's file list."""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Sequence

from app.preferences import PreservationOptions
from services.metadata.backend import MetadataBackend
from services.metadata.models import CleanResult, FileRecord, MetadataBackendError
from shared.result import Result


_LOGGER = logging.getLogger(__name__)

SessionListener = Callable[[tuple[FileRecord, ...]], None]


class FileSession:
    """Owns the file records for one running client.

    Every state change is published to ``on_change`` as a snapshot of the whole
    list, in the order the changes happened.  Files are read and cleaned one at
    a time in submission order.
    """

    def __init__(
        self,
        backend: MetadataBackend,
        *,
        preservation: PreservationOptions | None = None,
        backup: bool = False,
        on_change: SessionListener | None = None,
    ) -> None:
        self._backend = backend
        self.preservation = preservation or PreservationOptions()
        self._backup = backup
        self._on_change = on_change
        self._records: list[FileRecord] = []

    @property
    def records(self) -> tuple[FileRecord, ...]:
        return tuple(self._records)

    def get(self, path: str) -> FileRecord | None:
        for record in self._records:
            if record.path == path:
                return record
        return None

    def _emit(self) -> None:
        if self._on_change is not None:
            self._on_change(self.records)

    def _update(self, path: str, **changes: object) -> FileRecord | None:
        for index, record in enumerate(self._records):
            if record.path == path:
                updated = dataclasses.replace(record, **changes)
                self._records[index] = updated
                self._emit()
                return updated
        return None

    def add_paths(self, paths: Sequence[str]) -> Result[list[FileRecord], str]:
        """Expand ``paths``, add the new files, then read their metadata in order."""

        expanded = Result.capture(
            lambda: self._backend.expand_paths(list(paths)), MetadataBackendError, OSError
        )
        if expanded.is_err():
            _LOGGER.error("Failed to expand paths: %s", expanded.error)
            return Result.err(expanded.error)

        known = {record.path for record in self._records}
        added: list[str] = []
        for path in expanded.unwrap():
            if path in known:
                _LOGGER.debug("Skipping %s; already in the session", path)
                continue
            known.add(path)
            added.append(path)
        if not added:
            return Result.ok([])

        self._records.extend(FileRecord.pending(path) for path in added)
        self._emit()

        for path in added:
            self._load_metadata(path)
        added_set = set(added)
        return Result.ok([record for record in self._records if record.path in added_set])

    def _load_metadata(self, path: str) -> None:
        info = Result.capture(
            lambda: self._backend.read_metadata(path), MetadataBackendError, OSError
        )
        if info.is_err():
            _LOGGER.warning("Failed to read metadata for %s: %s", path, info.error)
            self._update(path, metadata_error=info.error, metadata_loading=False)
            return
        loaded = info.unwrap()
        self._update(
            path,
            metadata=dict(loaded.metadata),
            size=loaded.file_size,
            metadata_loading=False,
        )

    def clean_file(self, path: str) -> Result[CleanResult, str]:
        if self.get(path) is None:
            return Result.err(f"File is not in the session: {path}")

        self._update(path, processing=True)
        outcome = Result.capture(
            lambda: self._backend.clean_metadata(
                path, backup=self._backup, preservation=self.preservation
            ),
            MetadataBackendError,
            OSError,
        )
        if outcome.is_ok() and not outcome.unwrap().success:
            outcome = Result.err(outcome.unwrap().message.strip() or "Cleaning failed")

        if outcome.is_err():
            _LOGGER.warning("Failed to clean %s: %s", path, outcome.error)
            self._update(path, processing=False)
            return outcome
        self._update(path, cleaned=True, processing=False)
        return outcome

    def clean_all(self) -> list[Result[CleanResult, str]]:
        """Clean every file not cleaned yet, one at a time in list order."""

        pending = [record.path for record in self._records if not record.cleaned]
        return [self.clean_file(path) for path in pending]

    def clear(self) -> None:
        self._records.clear()
        self._emit()


__all__ = ["FileSession", "SessionListener"]
