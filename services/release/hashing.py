"""Content digests for pinned downloads."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from services.release.models import IntegrityError

_LOGGER = logging.getLogger(__name__)


def calculate_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as source:
        for chunk in iter(lambda: source.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def verify_sha256(path: Path, expected: str) -> str:
    """Return the digest of ``path`` or raise :class:`IntegrityError` on mismatch.

    Hex digests are compared case-insensitively.
    """

    actual = calculate_sha256(path)
    if actual.lower() != expected.strip().lower():
        raise IntegrityError(path, expected, actual)
    _LOGGER.info("Checksum verified for %s", path.name)
    return actual
