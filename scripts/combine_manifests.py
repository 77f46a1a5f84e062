"""Merge the per-platform manifest fragments into the published latest.json."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence


def ensure_project_root_on_sys_path() -> Path:
    """Ensure the project root is importable when the script runs standalone."""

    project_root = Path(__file__).resolve().parent.parent
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)
    return project_root


ensure_project_root_on_sys_path()

from app.config import get_project_root, get_release_config
from app.version import get_app_version
from services.release.cli import EXIT_OK, ReleaseArgumentParser, run_tool
from services.release.constants import COMBINED_FRAGMENT_SOURCES, FRAGMENT_FILENAME
from services.release.manifest import combine_manifests


def build_parser() -> ReleaseArgumentParser:
    return ReleaseArgumentParser(prog="combine-manifests", description=__doc__)


def _combine(args: argparse.Namespace) -> int:
    config = get_release_config()
    paths = config.paths.resolve(get_project_root())
    combine_manifests(
        paths.artifacts_dir,
        COMBINED_FRAGMENT_SOURCES,
        version=get_app_version(),
        output_name=FRAGMENT_FILENAME,
    )
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    return run_tool("combine-manifests", _combine, build_parser(), argv)


if __name__ == "__main__":
    raise SystemExit(main())
