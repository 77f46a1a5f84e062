"""Rename default build outputs to the public release naming convention."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from services.release.probe import probe_file
from services.release.targets import rename_root, rename_rules, resolve_platform

_LOGGER = logging.getLogger(__name__)


@dataclass
class RenameReport:
    renamed: list[tuple[Path, Path]] = field(default_factory=list)
    missing: list[Path] = field(default_factory=list)


def rename_artifacts(
    platform: str,
    target: str,
    *,
    target_root: Path,
    product: str,
    version: str,
) -> RenameReport:
    """Rename every known output for ``platform``; missing files are only logged.

    Raises :class:`~services.release.models.UsageError` for unknown platforms.
    """

    platform_target = resolve_platform(platform, target, product=product, version=version)
    root = rename_root(platform, target, target_root)
    report = RenameReport()

    _LOGGER.info("Renaming %s artifacts in %s", platform, root)
    for rule in rename_rules(platform_target, product=product, version=version):
        directory = root / rule.subdir
        source = probe_file(directory / rule.source)
        if not source.found:
            _LOGGER.warning("Not found: %s", source.path)
            report.missing.append(source.path)
            continue
        destination = directory / rule.destination
        source.path.replace(destination)
        _LOGGER.info("Renamed: %s -> %s", rule.source, rule.destination)
        report.renamed.append((source.path, destination))

    return report


__all__ = ["RenameReport", "rename_artifacts"]
