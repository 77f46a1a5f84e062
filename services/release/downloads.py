"""Network access for the release tooling."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Protocol
from urllib.error import URLError
from urllib.request import Request, urlopen

from services.release.models import NetworkError

_LOGGER = logging.getLogger(__name__)

_USER_AGENT = "metadatazero-release-tools"


class Downloader(Protocol):
    """Protocol describing how remote files reach the local disk."""

    def download(self, url: str, destination: Path) -> Path:
        """Store the resource at ``url`` in ``destination`` and return it."""


class UrllibDownloader:
    """Stream HTTP(S) downloads to disk, following redirects."""

    def __init__(self, *, timeout: float | None = None) -> None:
        self._timeout = timeout

    def download(self, url: str, destination: Path) -> Path:
        _LOGGER.info("Downloading %s", url)
        destination.parent.mkdir(parents=True, exist_ok=True)
        request = Request(url, headers={"User-Agent": _USER_AGENT})
        try:
            with urlopen(request, timeout=self._timeout) as response, destination.open(  # nosec - HTTPS
                "wb"
            ) as target:
                shutil.copyfileobj(response, target)
        except (OSError, URLError) as exc:
            raise NetworkError(f"Failed to download {url}: {exc}") from exc
        _LOGGER.debug("Downloaded %s to %s", url, destination)
        return destination


__all__ = ["Downloader", "UrllibDownloader"]
