"""Rename a build job's default bundle outputs to the public release names."""

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
from services.release.renamer import rename_artifacts
from services.release.targets import SUPPORTED_PLATFORMS


def build_parser() -> ReleaseArgumentParser:
    parser = ReleaseArgumentParser(prog="rename-artifacts", description=__doc__)
    parser.add_argument("platform", choices=SUPPORTED_PLATFORMS, help="Platform the job built")
    parser.add_argument("target", help="Build target, e.g. x86_64-apple-darwin or 'default'")
    return parser


def _rename(args: argparse.Namespace) -> int:
    config = get_release_config()
    paths = config.paths.resolve(get_project_root())
    rename_artifacts(
        args.platform,
        args.target,
        target_root=paths.target_root,
        product=config.product_name,
        version=get_app_version(),
    )
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    return run_tool("rename-artifacts", _rename, build_parser(), argv)


if __name__ == "__main__":
    raise SystemExit(main())
