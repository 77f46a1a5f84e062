"""Sources of the combined update manifest."""

from __future__ import annotations

import json
import logging
import platform
import sys
from pathlib import Path
from typing import Protocol
from urllib.error import URLError
from urllib.request import Request, urlopen

from services.update.models import UpdateError, UpdateManifest


_LOGGER = logging.getLogger(__name__)

_MACHINE_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "x86_64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
}


def current_platform_id(
    system: str | None = None, machine: str | None = None
) -> str | None:
    """Return the manifest platform identifier for this process, if supported."""

    system = (system if system is not None else sys.platform).lower()
    machine = (machine if machine is not None else platform.machine()).lower()
    arch = _MACHINE_ALIASES.get(machine)
    if arch is None:
        return None
    if system.startswith("win"):
        return f"windows-{arch}"
    if system == "darwin":
        return f"darwin-{arch}"
    if system.startswith("linux"):
        return f"linux-{arch}"
    return None


class ManifestProvider(Protocol):
    """Protocol describing where the combined manifest comes from."""

    def fetch_manifest(self) -> UpdateManifest:
        """Return the parsed manifest or raise :class:`UpdateError`."""


class HttpManifestProvider:
    """Fetch the combined manifest from the release endpoint."""

    def __init__(self, endpoint: str, *, timeout: float | None = 30.0) -> None:
        self._endpoint = endpoint
        self._timeout = timeout

    def fetch_manifest(self) -> UpdateManifest:
        _LOGGER.debug("Fetching update manifest from %s", self._endpoint)
        request = Request(self._endpoint, headers={"Accept": "application/json"})
        try:
            with urlopen(request, timeout=self._timeout) as response:  # nosec - HTTPS endpoint
                data = json.load(response)
        except (OSError, URLError) as exc:
            raise UpdateError(f"Failed to fetch update manifest: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise UpdateError(f"Update manifest is not valid JSON: {exc}") from exc
        return UpdateManifest.from_json(data)


class LocalManifestProvider:
    """Serve the combined manifest from a local file for testing."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def fetch_manifest(self) -> UpdateManifest:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise UpdateError(f"Failed to read local update manifest: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise UpdateError(f"Local update manifest is not valid JSON: {exc}") from exc
        _LOGGER.info("Loaded local update manifest %s", self._path)
        return UpdateManifest.from_json(data)


__all__ = [
    "HttpManifestProvider",
    "LocalManifestProvider",
    "ManifestProvider",
    "current_platform_id",
]
