"""Data models and error taxonomy for the release tooling."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


class ReleaseError(RuntimeError):
    """Base class for build-side failures."""


class IntegrityError(ReleaseError):
    """Raised when a downloaded file does not match its pinned digest."""

    def __init__(self, path: Path, expected: str, actual: str) -> None:
        super().__init__(
            f"Checksum verification failed for {path.name}: "
            f"expected {expected} but computed {actual}"
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class NetworkError(ReleaseError):
    """Raised when a download cannot be completed."""


class UsageError(ReleaseError):
    """Raised for missing command-line arguments or unknown platforms."""


class EmptyUnionError(ReleaseError):
    """Raised when combining fragments produced no platforms at all."""


class DuplicatePlatformError(ReleaseError):
    """Raised by strict combines when two fragments claim the same platform."""


class MalformedManifest(ReleaseError, ValueError):
    """A fragment exists but is not a usable manifest document.

    Soft during combine: the fragment is skipped and logged.
    """


class MissingArtifact(ReleaseError, LookupError):
    """An expected file is absent.

    Soft for batch stages (the unit of work is skipped), fatal for the fetcher.
    """


@dataclass(frozen=True)
class PinnedDependency:
    """A third-party bundle pinned to a version and per-archive digests."""

    name: str
    version: str
    expected_hashes: Mapping[str, str]
    binaries_root: Path

    def expected_hash(self, family: str) -> str:
        digest = self.expected_hashes.get(family, "").strip()
        if not digest:
            raise IntegrityError(Path(f"{self.name}-{family}"), "<unpinned>", "<not computed>")
        return digest


@dataclass(frozen=True)
class PlatformArtifactSet:
    """The files one build job produced for one platform."""

    platform_id: str
    bundle_root: Path
    asset_file: Path
    signature_file: Path


@dataclass(frozen=True)
class PlatformEntry:
    signature: str
    url: str

    def to_json(self) -> dict[str, str]:
        return {"signature": self.signature, "url": self.url}


@dataclass(frozen=True)
class ManifestFragment:
    """Update manifest document; one platform for fragments, many once combined."""

    version: str
    pub_date: str
    platforms: Mapping[str, PlatformEntry] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "pub_date": self.pub_date,
            "platforms": {
                platform_id: entry.to_json() for platform_id, entry in self.platforms.items()
            },
        }

    @classmethod
    def from_json(cls, data: Any) -> "ManifestFragment":
        if not isinstance(data, Mapping):
            raise MalformedManifest("manifest is not a JSON object")
        platforms = data.get("platforms")
        if not isinstance(platforms, Mapping):
            raise MalformedManifest("manifest has no 'platforms' object")
        entries: dict[str, PlatformEntry] = {}
        for platform_id, entry in platforms.items():
            if not isinstance(entry, Mapping):
                raise MalformedManifest(f"platform {platform_id!r} is not an object")
            signature = entry.get("signature")
            url = entry.get("url")
            if not isinstance(signature, str) or not isinstance(url, str):
                raise MalformedManifest(
                    f"platform {platform_id!r} needs string 'signature' and 'url' fields"
                )
            entries[str(platform_id)] = PlatformEntry(signature=signature, url=url)
        return cls(
            version=str(data.get("version", "")),
            pub_date=str(data.get("pub_date", "")),
            platforms=entries,
        )
