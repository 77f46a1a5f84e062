from __future__ import annotations

import logging
from pathlib import Path

import pytest

from services.release.models import UsageError
from services.release.renamer import rename_artifacts
from services.release.targets import bundle_root, rename_root, resolve_platform


PRODUCT = "MetadataZero"


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"artifact")
    return path


class TestBundleRoot:
    def test_default_target_uses_release_bundle(self, tmp_path: Path) -> None:
        assert bundle_root(tmp_path, "default") == tmp_path / "release" / "bundle"

    def test_universal_target_maps_to_universal_darwin(self, tmp_path: Path) -> None:
        assert bundle_root(tmp_path, "universal-apple-darwin") == (
            tmp_path / "universal-apple-darwin" / "release" / "bundle"
        )

    def test_explicit_target_is_a_subdirectory(self, tmp_path: Path) -> None:
        assert bundle_root(tmp_path, "aarch64-apple-darwin") == (
            tmp_path / "aarch64-apple-darwin" / "release" / "bundle"
        )


class TestResolvePlatform:
    @pytest.mark.parametrize(
        ("platform", "target", "platform_id", "asset"),
        [
            ("darwin", "aarch64-apple-darwin", "darwin-aarch64", "MetadataZero-1.2.3-mac-arm64.app.tar.gz"),
            ("darwin", "x86_64-apple-darwin", "darwin-x86_64", "MetadataZero-1.2.3-mac-x64.app.tar.gz"),
            ("linux", "default", "linux-x86_64", "MetadataZero-1.2.3-linux-x64.AppImage"),
            ("windows", "default", "windows-x86_64", "MetadataZero-1.2.3-win-x64.exe"),
        ],
    )
    def test_platform_table(self, platform: str, target: str, platform_id: str, asset: str) -> None:
        resolved = resolve_platform(platform, target, product=PRODUCT, version="1.2.3")

        assert resolved.platform_id == platform_id
        assert resolved.updater_asset == asset
        assert resolved.signature_name == f"{asset}.sig"

    def test_unknown_platform_is_a_usage_error(self) -> None:
        with pytest.raises(UsageError, match="Unknown platform: beos"):
            resolve_platform("beos", "default", product=PRODUCT, version="1.0.0")


def test_darwin_arm_dmg_is_renamed_and_missing_files_warn(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    root = bundle_root(tmp_path, "aarch64-apple-darwin")
    _touch(root / "dmg" / "MetadataZero_1.2.3_aarch64.dmg")

    with caplog.at_level(logging.WARNING):
        report = rename_artifacts(
            "darwin", "aarch64-apple-darwin", target_root=tmp_path, product=PRODUCT, version="1.2.3"
        )

    assert (root / "dmg" / "MetadataZero-1.2.3-mac-arm64.dmg").exists()
    assert not (root / "dmg" / "MetadataZero_1.2.3_aarch64.dmg").exists()
    assert len(report.renamed) == 1
    assert {path.name for path in report.missing} == {
        "MetadataZero.app.tar.gz",
        "MetadataZero.app.tar.gz.sig",
    }
    assert "Not found:" in caplog.text


def test_linux_outputs_are_renamed(tmp_path: Path) -> None:
    root = bundle_root(tmp_path, "default")
    _touch(root / "appimage" / "MetadataZero_2.0.0_amd64.AppImage")
    _touch(root / "appimage" / "MetadataZero_2.0.0_amd64.AppImage.sig")
    _touch(root / "deb" / "MetadataZero_2.0.0_amd64.deb")

    report = rename_artifacts("linux", "default", target_root=tmp_path, product=PRODUCT, version="2.0.0")

    assert report.missing == []
    assert sorted(path.name for path in (root / "appimage").iterdir()) == [
        "MetadataZero-2.0.0-linux-x64.AppImage",
        "MetadataZero-2.0.0-linux-x64.AppImage.sig",
    ]
    assert (root / "deb" / "MetadataZero-2.0.0-linux-x64.deb").exists()


def test_windows_outputs_are_renamed(tmp_path: Path) -> None:
    root = bundle_root(tmp_path, "default")
    _touch(root / "nsis" / "MetadataZero_1.0.0_x64-setup.exe")
    _touch(root / "msi" / "MetadataZero_1.0.0_x64_en-US.msi.sig")

    report = rename_artifacts("windows", "default", target_root=tmp_path, product=PRODUCT, version="1.0.0")

    assert (root / "nsis" / "MetadataZero-1.0.0-win-x64.exe").exists()
    assert (root / "msi" / "MetadataZero-1.0.0-win-x64.msi.sig").exists()
    assert len(report.renamed) == 2
    assert len(report.missing) == 2


@pytest.mark.parametrize("platform", ["linux", "windows"])
def test_non_mac_outputs_are_read_from_default_bundle(tmp_path: Path, platform: str) -> None:
    assert rename_root(platform, "x86_64-unknown-linux-gnu", tmp_path) == bundle_root(tmp_path, "default")


def test_linux_rename_ignores_explicit_target(tmp_path: Path) -> None:
    root = bundle_root(tmp_path, "default")
    _touch(root / "deb" / "MetadataZero_1.0.0_amd64.deb")

    report = rename_artifacts(
        "linux", "x86_64-unknown-linux-gnu", target_root=tmp_path, product=PRODUCT, version="1.0.0"
    )

    assert report.renamed == [
        (root / "deb" / "MetadataZero_1.0.0_amd64.deb", root / "deb" / "MetadataZero-1.0.0-linux-x64.deb")
    ]


def test_mac_outputs_follow_target(tmp_path: Path) -> None:
    assert rename_root("darwin", "aarch64-apple-darwin", tmp_path) == bundle_root(
        tmp_path, "aarch64-apple-darwin"
    )

def test_rename_is_repeatable(tmp_path: Path) -> None:
    root = bundle_root(tmp_path, "default")
    _touch(root / "deb" / "MetadataZero_1.0.0_amd64.deb")

    rename_artifacts("linux", "default", target_root=tmp_path, product=PRODUCT, version="1.0.0")
    second = rename_artifacts("linux", "default", target_root=tmp_path, product=PRODUCT, version="1.0.0")

    assert second.renamed == []
    assert (root / "deb" / "MetadataZero-1.0.0-linux-x64.deb").exists()
