"""Helpers for comparing release versions."""

from __future__ import annotations

from packaging.version import InvalidVersion, Version


__all__ = ["compare_versions", "is_version_newer"]


def _strip_tag(version: str) -> str:
    stripped = version.strip()
    return stripped[1:] if stripped.startswith("v") else stripped


def compare_versions(current_version: str, candidate: str) -> int:
    """Compare ``candidate`` against ``current_version``.

    Returns ``1`` when ``candidate`` is newer, ``-1`` when it is older and ``0``
    when they are equivalent.  Strings that are not valid PEP 440 versions are
    compared token by token.
    """

    current_version = _strip_tag(current_version)
    candidate = _strip_tag(candidate)
    if candidate == current_version:
        return 0

    try:
        candidate_parsed = Version(candidate)
        current_parsed = Version(current_version)
    except InvalidVersion:
        return _compare_tokens(current_version, candidate)

    if candidate_parsed == current_parsed:
        return 0
    return 1 if candidate_parsed > current_parsed else -1


def is_version_newer(current_version: str, candidate: str) -> bool:
    """Return ``True`` if ``candidate`` is newer than ``current_version``."""

    return compare_versions(current_version, candidate) > 0


def _compare_tokens(current_version: str, candidate: str) -> int:
    def tokenize(version: str) -> list[tuple[int, object]]:
        tokens: list[tuple[int, object]] = []
        for raw in version.replace("-", ".").replace("+", ".").split("."):
            if not raw:
                continue
            if raw.isdigit():
                tokens.append((0, int(raw)))
            else:
                tokens.append((1, raw.lower()))
        return tokens

    current_tokens = tokenize(current_version)
    candidate_tokens = tokenize(candidate)
    for index in range(max(len(current_tokens), len(candidate_tokens))):
        current_token = current_tokens[index] if index < len(current_tokens) else (0, 0)
        candidate_token = candidate_tokens[index] if index < len(candidate_tokens) else (0, 0)
        if candidate_token != current_token:
            return 1 if candidate_token > current_token else -1
    return 0
