"""Public API for the release tooling package."""

from __future__ import annotations

from services.release.constants import (
    COMBINED_FRAGMENT_SOURCES,
    EXIFTOOL_VERSION,
    FRAGMENT_FILENAME,
)
from services.release.downloads import Downloader, UrllibDownloader
from services.release.fetcher import DependencyFetcher, FetchOutcome, pinned_exiftool
from services.release.hashing import calculate_sha256, verify_sha256
from services.release.manifest import (
    combine_fragments,
    combine_manifests,
    generate_fragment,
    load_fragments,
)
from services.release.models import (
    DuplicatePlatformError,
    EmptyUnionError,
    IntegrityError,
    MalformedManifest,
    ManifestFragment,
    MissingArtifact,
    NetworkError,
    PinnedDependency,
    PlatformArtifactSet,
    PlatformEntry,
    ReleaseError,
    UsageError,
)
from services.release.probe import Probe, ProbeStatus, probe_file, probe_json, probe_text
from services.release.renamer import RenameReport, rename_artifacts

__all__ = [
    "COMBINED_FRAGMENT_SOURCES",
    "EXIFTOOL_VERSION",
    "FRAGMENT_FILENAME",
    "DependencyFetcher",
    "Downloader",
    "DuplicatePlatformError",
    "EmptyUnionError",
    "FetchOutcome",
    "IntegrityError",
    "MalformedManifest",
    "ManifestFragment",
    "MissingArtifact",
    "NetworkError",
    "PinnedDependency",
    "PlatformArtifactSet",
    "PlatformEntry",
    "Probe",
    "ProbeStatus",
    "ReleaseError",
    "RenameReport",
    "UrllibDownloader",
    "UsageError",
    "calculate_sha256",
    "combine_fragments",
    "combine_manifests",
    "generate_fragment",
    "load_fragments",
    "pinned_exiftool",
    "probe_file",
    "probe_json",
    "probe_text",
    "rename_artifacts",
    "verify_sha256",
]
