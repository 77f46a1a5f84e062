"""Per-platform build output tables shared by the renamer and generator."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from services.release.constants import FRAGMENT_FILENAME
from services.release.models import PlatformArtifactSet, UsageError

SUPPORTED_PLATFORMS = ("darwin", "linux", "windows")


def bundle_root(target_root: Path, target: str) -> Path:
    """Return the bundle directory the build tool writes for ``target``."""

    if "universal" in target:
        return target_root / "universal-apple-darwin" / "release" / "bundle"
    if target == "default":
        return target_root / "release" / "bundle"
    return target_root / target / "release" / "bundle"


def rename_root(platform: str, target: str, target_root: Path) -> Path:
    """Return the bundle directory the renamer works in.

    Only macOS builds are per-target; Linux and Windows jobs always build the
    default target, so their outputs are looked up there whatever ``target`` says.
    """

    if platform == "darwin":
        return bundle_root(target_root, target)
    return bundle_root(target_root, "default")


def _is_arm(target: str) -> bool:
    return "aarch64" in target


@dataclass(frozen=True)
class RenameRule:
    """One default build output and the public name it is published under."""

    subdir: str
    source: str
    destination: str


@dataclass(frozen=True)
class PlatformTarget:
    """Naming facts for one platform/target pair."""

    platform: str
    target: str
    platform_id: str
    public_tag: str
    updater_subdir: str
    updater_asset: str

    @property
    def signature_name(self) -> str:
        return f"{self.updater_asset}.sig"


def resolve_platform(platform: str, target: str, *, product: str, version: str) -> PlatformTarget:
    """Return the :class:`PlatformTarget` for ``platform``; raise :class:`UsageError` if unknown."""

    if platform == "darwin":
        arch = "arm64" if _is_arm(target) else "x64"
        platform_arch = "aarch64" if _is_arm(target) else "x86_64"
        tag = f"mac-{arch}"
        return PlatformTarget(
            platform=platform,
            target=target,
            platform_id=f"darwin-{platform_arch}",
            public_tag=tag,
            updater_subdir="macos",
            updater_asset=f"{product}-{version}-{tag}.app.tar.gz",
        )
    if platform == "linux":
        tag = "linux-x64"
        return PlatformTarget(
            platform=platform,
            target=target,
            platform_id="linux-x86_64",
            public_tag=tag,
            updater_subdir="appimage",
            updater_asset=f"{product}-{version}-{tag}.AppImage",
        )
    if platform == "windows":
        tag = "win-x64"
        return PlatformTarget(
            platform=platform,
            target=target,
            platform_id="windows-x86_64",
            public_tag=tag,
            updater_subdir="nsis",
            updater_asset=f"{product}-{version}-{tag}.exe",
        )
    raise UsageError(f"Unknown platform: {platform}")


def rename_rules(platform: PlatformTarget, *, product: str, version: str) -> tuple[RenameRule, ...]:
    """Return the default-name to public-name table for ``platform``."""

    public = f"{product}-{version}-{platform.public_tag}"
    if platform.platform == "darwin":
        build_arch = "aarch64" if _is_arm(platform.target) else "x64"
        return (
            RenameRule("dmg", f"{product}_{version}_{build_arch}.dmg", f"{public}.dmg"),
            RenameRule("macos", f"{product}.app.tar.gz", f"{public}.app.tar.gz"),
            RenameRule("macos", f"{product}.app.tar.gz.sig", f"{public}.app.tar.gz.sig"),
        )
    if platform.platform == "linux":
        return (
            RenameRule("appimage", f"{product}_{version}_amd64.AppImage", f"{public}.AppImage"),
            RenameRule(
                "appimage", f"{product}_{version}_amd64.AppImage.sig", f"{public}.AppImage.sig"
            ),
            RenameRule("deb", f"{product}_{version}_amd64.deb", f"{public}.deb"),
        )
    return (
        RenameRule("nsis", f"{product}_{version}_x64-setup.exe", f"{public}.exe"),
        RenameRule("nsis", f"{product}_{version}_x64-setup.exe.sig", f"{public}.exe.sig"),
        RenameRule("msi", f"{product}_{version}_x64_en-US.msi", f"{public}.msi"),
        RenameRule("msi", f"{product}_{version}_x64_en-US.msi.sig", f"{public}.msi.sig"),
    )


def artifact_set(platform: PlatformTarget, target_root: Path) -> PlatformArtifactSet:
    """Return where the updater asset, its signature and the fragment live."""

    root = bundle_root(target_root, platform.target)
    updater_dir = root / platform.updater_subdir
    return PlatformArtifactSet(
        platform_id=platform.platform_id,
        bundle_root=updater_dir,
        asset_file=updater_dir / platform.updater_asset,
        signature_file=updater_dir / platform.signature_name,
    )


def fragment_path(artifacts: PlatformArtifactSet) -> Path:
    return artifacts.bundle_root / FRAGMENT_FILENAME


__all__ = [
    "PlatformTarget",
    "RenameRule",
    "SUPPORTED_PLATFORMS",
    "artifact_set",
    "bundle_root",
    "fragment_path",
    "rename_root",
    "rename_rules",
    "resolve_platform",
]
