from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from services.release.constants import COMBINED_FRAGMENT_SOURCES
from services.release.manifest import (
    combine_fragments,
    combine_manifests,
    format_pub_date,
    generate_fragment,
    load_fragments,
    write_manifest,
)
from services.release.models import (
    DuplicatePlatformError,
    EmptyUnionError,
    MalformedManifest,
    ManifestFragment,
    PlatformEntry,
)
from services.release.targets import bundle_root
from tests.unit.release_test_utils import write_fragment


BASE = "https://github.com/metadatazero/metadatazero/releases/download"
MOMENT = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)


def _fragment(platform_id: str, signature: str = "sig", url: str = "https://x/y") -> ManifestFragment:
    return ManifestFragment(
        version="v1.0.0",
        pub_date="2024-01-01T00:00:00.000Z",
        platforms={platform_id: PlatformEntry(signature=signature, url=url)},
    )


def test_format_pub_date_has_millisecond_precision() -> None:
    assert format_pub_date(MOMENT) == "2024-05-06T07:08:09.123Z"


def test_format_pub_date_treats_naive_times_as_utc() -> None:
    assert format_pub_date(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05.000Z"


class TestGenerateFragment:
    def test_missing_signature_produces_no_output(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            result = generate_fragment(
                "linux",
                "default",
                target_root=tmp_path,
                product="MetadataZero",
                version="1.2.3",
                download_base=BASE,
            )

        assert result is None
        assert list(tmp_path.rglob("*")) == []
        assert "Skipping linux-x86_64 manifest generation" in caplog.text

    def test_writes_single_platform_fragment(self, tmp_path: Path) -> None:
        updater_dir = bundle_root(tmp_path, "aarch64-apple-darwin") / "macos"
        updater_dir.mkdir(parents=True)
        (updater_dir / "MetadataZero-1.2.3-mac-arm64.app.tar.gz.sig").write_text(
            "\n  dW50cnVzdGVk  \n", encoding="utf-8"
        )

        output = generate_fragment(
            "darwin",
            "aarch64-apple-darwin",
            target_root=tmp_path,
            product="MetadataZero",
            version="1.2.3",
            download_base=BASE,
            now=MOMENT,
        )

        assert output == updater_dir / "latest.json"
        document = json.loads(output.read_text(encoding="utf-8"))
        assert document == {
            "version": "v1.2.3",
            "pub_date": "2024-05-06T07:08:09.123Z",
            "platforms": {
                "darwin-aarch64": {
                    "signature": "dW50cnVzdGVk",
                    "url": f"{BASE}/v1.2.3/MetadataZero-1.2.3-mac-arm64.app.tar.gz",
                }
            },
        }


class TestCombine:
    def test_union_of_disjoint_fragments_copies_values_verbatim(self) -> None:
        fragments = [
            _fragment("linux-x86_64", signature="  a sig with spaces ", url="https://a"),
            _fragment("windows-x86_64", signature="b", url="https://b"),
            _fragment("darwin-aarch64", signature="c", url="https://c"),
        ]

        combined = combine_fragments(fragments, version="2.0.0", now=MOMENT)

        assert set(combined.platforms) == {"linux-x86_64", "windows-x86_64", "darwin-aarch64"}
        assert combined.platforms["linux-x86_64"] == PlatformEntry("  a sig with spaces ", "https://a")
        assert combined.version == "v2.0.0"
        assert combined.pub_date == "2024-05-06T07:08:09.123Z"

    def test_duplicate_platform_keeps_last_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            combined = combine_fragments(
                [_fragment("linux-x86_64", "first"), _fragment("linux-x86_64", "second")],
                version="1.0.0",
            )

        assert combined.platforms["linux-x86_64"].signature == "second"
        assert "appears in more than one fragment" in caplog.text

    def test_strict_combine_rejects_duplicates(self) -> None:
        with pytest.raises(DuplicatePlatformError):
            combine_fragments(
                [_fragment("linux-x86_64"), _fragment("linux-x86_64")],
                version="1.0.0",
                strict=True,
            )

    def test_empty_union_is_an_error(self) -> None:
        with pytest.raises(EmptyUnionError):
            combine_fragments([], version="1.0.0")


class TestCombineManifests:
    def test_missing_fragment_is_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        write_fragment(tmp_path / "latest-json-linux" / "latest.json", "linux-x86_64")
        write_fragment(tmp_path / "latest-json-windows" / "latest.json", "windows-x86_64")

        with caplog.at_level(logging.WARNING):
            output = combine_manifests(
                tmp_path, COMBINED_FRAGMENT_SOURCES, version="1.2.3", now=MOMENT
            )

        document = json.loads(output.read_text(encoding="utf-8"))
        assert output == tmp_path / "latest.json"
        assert set(document["platforms"]) == {"linux-x86_64", "windows-x86_64"}
        assert document["version"] == "v1.2.3"
        assert "Not found:" in caplog.text

    def test_malformed_fragment_is_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        write_fragment(tmp_path / "latest-json-linux" / "latest.json", "linux-x86_64")
        broken = tmp_path / "latest-json-windows" / "latest.json"
        broken.parent.mkdir(parents=True)
        broken.write_text("{ truncated", encoding="utf-8")
        wrong_shape = tmp_path / "latest-json-macos-aarch64" / "latest.json"
        wrong_shape.parent.mkdir(parents=True)
        wrong_shape.write_text('{"platforms": {"darwin-aarch64": {"url": 3}}}', encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            output = combine_manifests(tmp_path, COMBINED_FRAGMENT_SOURCES, version="1.2.3")

        document = json.loads(output.read_text(encoding="utf-8"))
        assert list(document["platforms"]) == ["linux-x86_64"]
        assert caplog.text.count("Skipped") == 2

    def test_unreadable_fragment_is_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        write_fragment(tmp_path / "latest-json-linux" / "latest.json", "linux-x86_64")
        (tmp_path / "latest-json-windows" / "latest.json").mkdir(parents=True)

        with caplog.at_level(logging.WARNING):
            output = combine_manifests(tmp_path, COMBINED_FRAGMENT_SOURCES, version="1.2.3")

        document = json.loads(output.read_text(encoding="utf-8"))
        assert list(document["platforms"]) == ["linux-x86_64"]
        assert "unreadable" in caplog.text

    def test_all_missing_writes_nothing(self, tmp_path: Path) -> None:
        with pytest.raises(EmptyUnionError):
            combine_manifests(tmp_path, COMBINED_FRAGMENT_SOURCES, version="1.2.3")

        assert not (tmp_path / "latest.json").exists()

    def test_previous_combined_manifest_is_replaced(self, tmp_path: Path) -> None:
        (tmp_path / "latest.json").write_text("stale", encoding="utf-8")
        write_fragment(tmp_path / "latest-json-macos-x86_64" / "latest.json", "darwin-x86_64")

        combine_manifests(tmp_path, COMBINED_FRAGMENT_SOURCES, version="1.2.3")

        document = json.loads((tmp_path / "latest.json").read_text(encoding="utf-8"))
        assert list(document["platforms"]) == ["darwin-x86_64"]
        assert [path.name for path in tmp_path.iterdir() if path.is_file()] == ["latest.json"]


def test_load_fragments_rejects_non_object_documents(tmp_path: Path) -> None:
    path = tmp_path / "latest.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert load_fragments([path]) == []


def test_fragment_from_json_requires_platforms_object() -> None:
    with pytest.raises(MalformedManifest):
        ManifestFragment.from_json({"version": "v1.0.0", "platforms": []})


def test_write_manifest_uses_two_space_indent(tmp_path: Path) -> None:
    path = write_manifest(_fragment("linux-x86_64"), tmp_path / "out" / "latest.json")

    assert path.read_text(encoding="utf-8").startswith('{\n  "version"')
