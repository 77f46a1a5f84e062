"""Generate per-platform update manifest fragments and combine them."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from app.version import tag_for_version
from services.release.models import (
    DuplicatePlatformError,
    EmptyUnionError,
    MalformedManifest,
    ManifestFragment,
    PlatformEntry,
)
from services.release.probe import ProbeStatus, probe_json, probe_text
from services.release.targets import artifact_set, fragment_path, resolve_platform

_LOGGER = logging.getLogger(__name__)


def format_pub_date(moment: datetime | None = None) -> str:
    """Return a UTC ISO-8601 timestamp with millisecond precision and a ``Z`` suffix."""

    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def download_url(download_base: str, version: str, asset_name: str) -> str:
    return f"{download_base}/{tag_for_version(version)}/{asset_name}"


def write_manifest(manifest: ManifestFragment, path: Path) -> Path:
    """Write ``manifest`` to ``path`` by atomically replacing any previous file."""

    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(manifest.to_json(), indent=2)
    handle, temp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as temp_file:
            temp_file.write(payload)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
    return path


def generate_fragment(
    platform: str,
    target: str,
    *,
    target_root: Path,
    product: str,
    version: str,
    download_base: str,
    now: datetime | None = None,
) -> Path | None:
    """Write the single-platform fragment for this build job.

    Returns the written path, or ``None`` when the job produced no signature
    for the platform (nothing to publish, not an error).
    """

    platform_target = resolve_platform(platform, target, product=product, version=version)
    artifacts = artifact_set(platform_target, target_root)

    signature = probe_text(artifacts.signature_file)
    if signature.status is ProbeStatus.ABSENT:
        _LOGGER.info("Signature file not found: %s", artifacts.signature_file)
        _LOGGER.info("Skipping %s manifest generation", platform_target.platform_id)
        return None

    url = download_url(download_base, version, platform_target.updater_asset)
    fragment = ManifestFragment(
        version=tag_for_version(version),
        pub_date=format_pub_date(now),
        platforms={
            platform_target.platform_id: PlatformEntry(signature=signature.require(), url=url)
        },
    )
    output = write_manifest(fragment, fragment_path(artifacts))

    _LOGGER.info("Generated %s", output)
    _LOGGER.info("  Platform: %s", platform_target.platform_id)
    _LOGGER.info("  Version: %s", fragment.version)
    _LOGGER.info("  URL: %s", url)
    return output


def load_fragments(paths: Iterable[Path]) -> list[ManifestFragment]:
    """Read every usable fragment in ``paths``, logging and skipping the rest."""

    fragments: list[ManifestFragment] = []
    for path in paths:
        probe = probe_json(path)
        if probe.status is ProbeStatus.ABSENT:
            _LOGGER.warning("Not found: %s", path)
            continue
        if probe.status is ProbeStatus.MALFORMED:
            _LOGGER.warning("Skipped %s: %s", path, probe.reason)
            continue
        if probe.status is ProbeStatus.UNREADABLE:
            _LOGGER.warning("Skipped %s: unreadable (%s)", path, probe.reason)
            continue
        try:
            fragment = ManifestFragment.from_json(probe.value)
        except MalformedManifest as exc:
            _LOGGER.warning("Skipped %s: %s", path, exc)
            continue
        _LOGGER.info("Merged %s", path)
        fragments.append(fragment)
    return fragments


def combine_fragments(
    fragments: Iterable[ManifestFragment],
    *,
    version: str,
    now: datetime | None = None,
    strict: bool = False,
) -> ManifestFragment:
    """Union the platform entries of ``fragments`` into one manifest.

    Version and publication date describe the combine itself.  A platform
    claimed twice keeps the last entry unless ``strict`` is set, in which case
    :class:`DuplicatePlatformError` is raised.  An empty union raises
    :class:`EmptyUnionError`.
    """

    platforms: dict[str, PlatformEntry] = {}
    for fragment in fragments:
        for platform_id, entry in fragment.platforms.items():
            if platform_id in platforms:
                if strict:
                    raise DuplicatePlatformError(
                        f"Platform {platform_id} appears in more than one fragment"
                    )
                _LOGGER.warning(
                    "Platform %s appears in more than one fragment; keeping the last",
                    platform_id,
                )
            platforms[platform_id] = entry

    if not platforms:
        raise EmptyUnionError("No platforms found in manifest fragments")

    return ManifestFragment(
        version=tag_for_version(version),
        pub_date=format_pub_date(now),
        platforms=platforms,
    )


def combine_manifests(
    artifacts_dir: Path,
    sources: Iterable[str],
    *,
    version: str,
    output_name: str = "latest.json",
    now: datetime | None = None,
    strict: bool = False,
) -> Path:
    """Combine the fragments found under ``artifacts_dir`` and write the result.

    Nothing is written when the union is empty.
    """

    fragments = load_fragments(artifacts_dir / source for source in sources)
    combined = combine_fragments(fragments, version=version, now=now, strict=strict)
    output = write_manifest(combined, artifacts_dir / output_name)

    _LOGGER.info("Generated combined manifest with %s platforms", len(combined.platforms))
    _LOGGER.info("  Platforms: %s", ", ".join(combined.platforms))
    _LOGGER.info("  Output: %s", output)
    return output


__all__ = [
    "combine_fragments",
    "combine_manifests",
    "download_url",
    "format_pub_date",
    "generate_fragment",
    "load_fragments",
    "write_manifest",
]
