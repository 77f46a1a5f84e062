from __future__ import annotations

"""Release version helpers."""

from functools import lru_cache
import os
import subprocess
from importlib import resources

_FALLBACK_VERSION = "0.0.0-dev"
_VERSION_ENV_VARS = ("METADATAZERO_APP_VERSION", "GITHUB_REF_NAME")


def normalize_version(raw_version: str) -> str:
    """Return ``raw_version`` without surrounding whitespace or a single ``v`` prefix."""

    version = raw_version.strip()
    if version.startswith("v"):
        version = version[1:]
    return version


def tag_for_version(version: str) -> str:
    """Return the release tag (``v`` + version) used in manifests and URLs."""

    return f"v{normalize_version(version)}"


def _read_version_file() -> str | None:
    try:
        text = resources.files(__package__).joinpath("VERSION").read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError, OSError):
        return None
    version = normalize_version(text)
    return version or None


def _version_from_env() -> str | None:
    for name in _VERSION_ENV_VARS:
        value = os.environ.get(name)
        if value and value.strip():
            return normalize_version(value)
    return None


def _version_from_git() -> str | None:
    try:
        output = subprocess.check_output(
            ["git", "describe", "--tags", "--abbrev=0"],
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    version = normalize_version(output)
    return version or None


@lru_cache(maxsize=1)
def get_app_version() -> str:
    """Return the version of the release being built or running.

    Resolution order:
    1. ``METADATAZERO_APP_VERSION`` or ``GITHUB_REF_NAME`` (CI tag builds).
    2. The ``VERSION`` file stamped into the package by ``stamp-version``.
    3. The most recent tag reported by ``git describe``.
    4. ``0.0.0-dev``.
    """

    for resolver in (_version_from_env, _read_version_file, _version_from_git):
        version = resolver()
        if version:
            return version
    return _FALLBACK_VERSION


__all__ = ["get_app_version", "normalize_version", "tag_for_version"]
