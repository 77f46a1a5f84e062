"""Download of update packages referenced by the manifest."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlopen

from services.update.models import AvailableUpdate, UpdateError


_LOGGER = logging.getLogger(__name__)

__all__ = ["download_update_package"]


def download_update_package(
    update: AvailableUpdate, directory: Path, *, timeout: float | None = None
) -> Path:
    """Download the package for ``update`` into ``directory``.

    ``file://`` URLs are supported so local manifests can point at packages on disk.
    """

    target_path = directory / update.asset_name
    _LOGGER.info("Downloading update %s from %s", update.version, update.url)
    try:
        with urlopen(update.url, timeout=timeout) as response, target_path.open("wb") as destination:  # nosec - HTTPS
            shutil.copyfileobj(response, destination)
    except (OSError, URLError) as exc:
        target_path.unlink(missing_ok=True)
        raise UpdateError(f"Failed to download update package: {exc}") from exc
    _LOGGER.debug("Downloaded update package to %s", target_path)
    return target_path
