"""Stamp the release version file from a Git tag or ref name."""

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


PROJECT_ROOT = ensure_project_root_on_sys_path()
DEFAULT_VERSION_FILE = PROJECT_ROOT / "app" / "VERSION"

from app.version import normalize_version
from services.release.cli import EXIT_OK, ReleaseArgumentParser, run_tool
from services.release.models import UsageError


def stamp_version(ref_name: str, output: Path) -> Path:
    """Write the normalized version derived from *ref_name* to *output*."""

    normalized = normalize_version(ref_name)
    if not normalized:
        raise UsageError(f"Cannot derive a version from ref {ref_name!r}")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(f"{normalized}\n", encoding="utf-8")
    return output


def build_parser() -> ReleaseArgumentParser:
    parser = ReleaseArgumentParser(prog="stamp-version", description=__doc__)
    parser.add_argument("ref_name", help="Git ref name to stamp (e.g. 'v1.2.3').")
    parser.add_argument("--output", type=Path, default=None, help="VERSION file to write.")
    return parser


def _stamp(args: argparse.Namespace) -> int:
    stamp_version(args.ref_name, args.output or DEFAULT_VERSION_FILE)
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    return run_tool("stamp-version", _stamp, build_parser(), argv)


if __name__ == "__main__":
    raise SystemExit(main())
