from __future__ import annotations

import io
import tarfile
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

import pytest

from services.release import archive as archive_module
from services.release.archive import ArchiveError, extract_archive


def test_extract_zip_writes_nested_members(tmp_path: Path) -> None:
    archive_path = tmp_path / "bundle.zip"
    with ZipFile(archive_path, "w") as archive:
        archive.writestr("pkg/bin/tool.exe", b"tool")
        archive.writestr("pkg/data/", b"")

    target = extract_archive(archive_path, tmp_path / "out")

    assert (target / "pkg" / "bin" / "tool.exe").read_bytes() == b"tool"
    assert (target / "pkg" / "data").is_dir()


def test_extract_zip_rejects_path_traversal(tmp_path: Path) -> None:
    archive_path = tmp_path / "evil.zip"
    with ZipFile(archive_path, "w") as archive:
        archive.writestr("../escape.txt", b"nope")

    with pytest.raises(ArchiveError):
        extract_archive(archive_path, tmp_path / "out")

    assert not (tmp_path / "escape.txt").exists()


def test_extract_zip_rejects_excessive_compression_ratio(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(archive_module.constants, "MAX_COMPRESSION_RATIO", 2)
    archive_path = tmp_path / "bomb.zip"
    with ZipFile(archive_path, "w", compression=ZIP_DEFLATED) as archive:
        archive.writestr("zeros.bin", b"\0" * 100000)

    with pytest.raises(ArchiveError):
        extract_archive(archive_path, tmp_path / "out")


def test_extract_zip_enforces_entry_limit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(archive_module.constants, "MAX_ARCHIVE_ENTRIES", 2)
    archive_path = tmp_path / "many.zip"
    with ZipFile(archive_path, "w") as archive:
        for index in range(3):
            archive.writestr(f"file{index}.txt", b"x")

    with pytest.raises(ArchiveError):
        extract_archive(archive_path, tmp_path / "out")


def test_extract_tar_skips_links_and_keeps_exec_bit(tmp_path: Path) -> None:
    archive_path = tmp_path / "bundle.tar.gz"
    with tarfile.open(archive_path, "w:gz") as archive:
        script = tarfile.TarInfo("pkg/run")
        script.size = 4
        script.mode = 0o755
        archive.addfile(script, io.BytesIO(b"echo"))
        link = tarfile.TarInfo("pkg/link")
        link.type = tarfile.SYMTYPE
        link.linkname = "/etc/passwd"
        archive.addfile(link)

    target = extract_archive(archive_path, tmp_path / "out")

    run = target / "pkg" / "run"
    assert run.read_bytes() == b"echo"
    assert run.stat().st_mode & 0o111
    assert not (target / "pkg" / "link").exists()


def test_extract_tar_rejects_absolute_member(tmp_path: Path) -> None:
    archive_path = tmp_path / "evil.tar"
    with tarfile.open(archive_path, "w") as archive:
        member = tarfile.TarInfo("/tmp/evil")
        member.size = 1
        archive.addfile(member, io.BytesIO(b"x"))

    with pytest.raises(ArchiveError):
        extract_archive(archive_path, tmp_path / "out")


def test_unreadable_archive_raises_archive_error(tmp_path: Path) -> None:
    archive_path = tmp_path / "broken.zip"
    archive_path.write_bytes(b"not a zip")

    with pytest.raises(ArchiveError):
        extract_archive(archive_path, tmp_path / "out")
