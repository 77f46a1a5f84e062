"""Download, verify and lay out the pinned ExifTool binaries for every platform."""

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
from services.release.cli import EXIT_OK, ReleaseArgumentParser, run_tool
from services.release.downloads import Downloader
from services.release.fetcher import DependencyFetcher, pinned_exiftool


def build_parser() -> ReleaseArgumentParser:
    return ReleaseArgumentParser(prog="fetch-dependency", description=__doc__)


def build_fetcher(downloader: Downloader | None = None) -> DependencyFetcher:
    config = get_release_config()
    paths = config.paths.resolve(get_project_root())
    return DependencyFetcher(pinned_exiftool(paths.binaries_dir), downloader=downloader)


def _fetch(args: argparse.Namespace) -> int:
    build_fetcher().ensure()
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    return run_tool("fetch-dependency", _fetch, build_parser(), argv)


if __name__ == "__main__":
    raise SystemExit(main())
