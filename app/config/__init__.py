"""Build and updater configuration loaded from JSON resources."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

_CONFIG_RESOURCE = "release.json"
_CONFIG_PATH_ENV = "METADATAZERO_RELEASE_CONFIG"
_PROJECT_ROOT_ENV = "METADATAZERO_PROJECT_ROOT"
_RELEASE_CONFIG_CACHE: ReleaseConfig | None = None

_DEFAULT_PRODUCT = "MetadataZero"
_DEFAULT_REPO = "metadatazero/metadatazero"
_DEFAULT_TARGET_ROOT = "src-tauri/target"
_DEFAULT_ARTIFACTS_DIR = "artifacts"
_DEFAULT_BINARIES_DIR = "src-tauri/binaries"


@dataclass(frozen=True)
class ReleasePaths:
    """Repository-relative locations used by the build tools."""

    target_root: str
    artifacts_dir: str
    binaries_dir: str

    def resolve(self, project_root: Path) -> "ResolvedPaths":
        return ResolvedPaths(
            target_root=project_root / self.target_root,
            artifacts_dir=project_root / self.artifacts_dir,
            binaries_dir=project_root / self.binaries_dir,
        )


@dataclass(frozen=True)
class ResolvedPaths:
    target_root: Path
    artifacts_dir: Path
    binaries_dir: Path


@dataclass(frozen=True)
class UpdaterConfig:
    """Where installed copies poll for updates and which key signs them."""

    endpoint: str
    pubkey: str


@dataclass(frozen=True)
class ReleaseConfig:
    """Structured build configuration shared by the release scripts and client."""

    product_name: str
    github_repo: str
    paths: ReleasePaths
    updater: UpdaterConfig

    @property
    def download_base(self) -> str:
        return f"https://github.com/{self.github_repo}/releases/download"


def get_release_config() -> ReleaseConfig:
    """Return the cached release configuration."""

    global _RELEASE_CONFIG_CACHE
    if _RELEASE_CONFIG_CACHE is None:
        _RELEASE_CONFIG_CACHE = load_release_config()
    return _RELEASE_CONFIG_CACHE


def reset_release_config_cache() -> None:
    """Reset the cached configuration for subsequent reloads."""

    global _RELEASE_CONFIG_CACHE
    _RELEASE_CONFIG_CACHE = None


def get_project_root() -> Path:
    """Return the directory build-tool paths are resolved against."""

    override = os.environ.get(_PROJECT_ROOT_ENV)
    if override:
        return Path(override).expanduser()
    return Path.cwd()


def load_release_config(path: str | Path | None = None) -> ReleaseConfig:
    """Load configuration from ``path``, ``$METADATAZERO_RELEASE_CONFIG`` or the bundled resource."""

    data = _read_config_data(path)
    product_name = _coerce_text(data.get("product_name"), default=_DEFAULT_PRODUCT)
    github_repo = _coerce_repo(data.get("github_repo"))
    paths = _parse_paths_section(data.get("paths"))
    updater = _parse_updater_section(data.get("updater"), github_repo)
    return ReleaseConfig(
        product_name=product_name,
        github_repo=github_repo,
        paths=paths,
        updater=updater,
    )


def _read_config_data(path: str | Path | None) -> Mapping[str, Any]:
    if path is None:
        override = os.environ.get(_CONFIG_PATH_ENV)
        if override:
            path = override
    if path is not None:
        return _load_json_from_path(Path(path).expanduser())
    return _load_default_config_data()


def _load_json_from_path(path: Path) -> Mapping[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    return _parse_json(raw)


def _load_default_config_data() -> Mapping[str, Any]:
    try:
        resource = resources.files(__package__).joinpath(_CONFIG_RESOURCE)
        raw = resource.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return {}
    return _parse_json(raw)


def _parse_json(raw: str) -> Mapping[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if isinstance(parsed, Mapping):
        return parsed
    return {}


def _parse_paths_section(section: Any) -> ReleasePaths:
    if not isinstance(section, Mapping):
        section = {}
    return ReleasePaths(
        target_root=_coerce_relative(section.get("target_root"), default=_DEFAULT_TARGET_ROOT),
        artifacts_dir=_coerce_relative(section.get("artifacts_dir"), default=_DEFAULT_ARTIFACTS_DIR),
        binaries_dir=_coerce_relative(section.get("binaries_dir"), default=_DEFAULT_BINARIES_DIR),
    )


def _parse_updater_section(section: Any, github_repo: str) -> UpdaterConfig:
    default_endpoint = f"https://github.com/{github_repo}/releases/latest/download/latest.json"
    if not isinstance(section, Mapping):
        return UpdaterConfig(endpoint=default_endpoint, pubkey="")
    endpoint = _coerce_text(section.get("endpoint"), default=default_endpoint)
    if not endpoint.startswith("https://"):
        endpoint = default_endpoint
    pubkey = section.get("pubkey")
    return UpdaterConfig(
        endpoint=endpoint,
        pubkey=pubkey.strip() if isinstance(pubkey, str) else "",
    )


def _coerce_text(value: Any, *, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _coerce_repo(value: Any) -> str:
    candidate = _coerce_text(value, default=_DEFAULT_REPO).strip("/")
    owner, _, name = candidate.partition("/")
    if not owner or not name or "/" in name:
        return _DEFAULT_REPO
    return candidate


def _coerce_relative(value: Any, *, default: str) -> str:
    candidate = _coerce_text(value, default=default).replace("\\", "/")
    if Path(candidate).is_absolute() or ".." in candidate.split("/"):
        return default
    return candidate


__all__ = [
    "ReleaseConfig",
    "ReleasePaths",
    "ResolvedPaths",
    "UpdaterConfig",
    "get_project_root",
    "get_release_config",
    "load_release_config",
    "reset_release_config_cache",
]
