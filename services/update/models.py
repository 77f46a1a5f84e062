"""Data models used by the update client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


class UpdateError(RuntimeError):
    """Raised when an update cannot be checked, downloaded, verified or installed."""


class SignatureError(UpdateError):
    """Raised when a downloaded package does not carry a valid signature."""


class RelaunchError(UpdateError):
    """Raised when the application cannot be restarted after an update."""


@dataclass(frozen=True)
class PlatformRelease:
    signature: str
    url: str


@dataclass(frozen=True)
class UpdateManifest:
    """The combined manifest published alongside the release assets."""

    version: str
    pub_date: str | None = None
    notes: str | None = None
    platforms: Mapping[str, PlatformRelease] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> "UpdateManifest":
        if not isinstance(data, Mapping):
            raise UpdateError("Update manifest is not a JSON object")
        version = str(data.get("version") or "").strip()
        if version.startswith("v"):
            version = version[1:]
        if not version:
            raise UpdateError("Update manifest does not declare a version")
        raw_platforms = data.get("platforms")
        if not isinstance(raw_platforms, Mapping):
            raise UpdateError("Update manifest does not list any platforms")

        platforms: dict[str, PlatformRelease] = {}
        for platform_id, entry in raw_platforms.items():
            if not isinstance(entry, Mapping):
                continue
            signature = entry.get("signature")
            url = entry.get("url")
            if isinstance(signature, str) and isinstance(url, str) and signature and url:
                platforms[str(platform_id)] = PlatformRelease(signature=signature, url=url)

        pub_date = data.get("pub_date")
        notes = data.get("notes")
        return cls(
            version=version,
            pub_date=pub_date if isinstance(pub_date, str) else None,
            notes=notes.strip() or None if isinstance(notes, str) else None,
            platforms=platforms,
        )


@dataclass(frozen=True)
class AvailableUpdate:
    """An update newer than the running version, resolved for this platform."""

    current_version: str
    version: str
    platform_id: str
    url: str
    signature: str
    notes: str | None = None

    @property
    def asset_name(self) -> str:
        return self.url.rstrip("/").rsplit("/", 1)[-1] or "update"
