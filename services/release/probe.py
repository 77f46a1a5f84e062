"""Uniform existence checks for artifacts that a build job may not have produced.

Every batch stage asks the same question about its inputs: is the file there,
and if so, can it be read?  :func:`probe_file`, :func:`probe_text` and
:func:`probe_json` answer with a :class:`Probe` so callers can skip absent or
malformed inputs with a log line instead of aborting.  A path that exists but
cannot be read (permission problems, a directory where a file was expected)
is reported as unreadable so the caller decides whether that is fatal.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from services.release.models import MalformedManifest, MissingArtifact

_LOGGER = logging.getLogger(__name__)


class ProbeStatus(str, Enum):
    FOUND = "found"
    ABSENT = "absent"
    MALFORMED = "malformed"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class Probe:
    status: ProbeStatus
    path: Path
    value: Any = None
    reason: str | None = None

    @property
    def found(self) -> bool:
        return self.status is ProbeStatus.FOUND

    def require(self) -> Any:
        """Return the probed value, raising unless the input was found."""

        if self.status is ProbeStatus.ABSENT:
            raise MissingArtifact(f"Not found: {self.path}")
        if self.status is ProbeStatus.MALFORMED:
            raise MalformedManifest(f"Malformed {self.path}: {self.reason}")
        if self.status is ProbeStatus.UNREADABLE:
            raise MissingArtifact(f"Unreadable {self.path}: {self.reason}")
        return self.value


def probe_file(path: Path) -> Probe:
    if path.is_file():
        return Probe(ProbeStatus.FOUND, path, value=path)
    return Probe(ProbeStatus.ABSENT, path, reason="not found")


def probe_text(path: Path) -> Probe:
    """Return the whitespace-trimmed text of ``path``."""

    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return Probe(ProbeStatus.ABSENT, path, reason="not found")
    except OSError as exc:
        return Probe(ProbeStatus.UNREADABLE, path, reason=str(exc))
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        return Probe(ProbeStatus.MALFORMED, path, reason=f"not UTF-8 text: {exc}")
    return Probe(ProbeStatus.FOUND, path, value=text.strip())


def probe_json(path: Path) -> Probe:
    """Return the decoded JSON document stored at ``path``."""

    text_probe = probe_text(path)
    if not text_probe.found:
        return text_probe
    try:
        value = json.loads(text_probe.value)
    except json.JSONDecodeError as exc:
        _LOGGER.debug("Failed to decode JSON from %s", path, exc_info=True)
        return Probe(ProbeStatus.MALFORMED, path, reason=str(exc))
    return Probe(ProbeStatus.FOUND, path, value=value)


__all__ = ["Probe", "ProbeStatus", "probe_file", "probe_json", "probe_text"]
