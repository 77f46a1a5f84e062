"""Constants shared across the release tooling modules."""

from __future__ import annotations

EXIFTOOL_VERSION = "13.36"
EXIFTOOL_UNIX_SHA256 = "f70ecbcdccc18268d4d3c290faf8cf73b1cf128e3e7f8671e24d6604cae4dc73"
EXIFTOOL_WINDOWS_SHA256 = "6e2ba32f10883aec180f71cf257fd8ac7d4a9d12f7c23e0a965f6f4b7fa7d0e9"

EXIFTOOL_UNIX_URL = "https://github.com/exiftool/exiftool/archive/refs/tags/{version}.tar.gz"
EXIFTOOL_WINDOWS_URL = (
    "https://sourceforge.net/projects/exiftool/files/exiftool-{version}_64.zip/download"
)

UNIX_FAMILY = "unix"
WINDOWS_FAMILY = "windows"

EXIFTOOL_UNIX_TARGETS = (
    "exiftool-x86_64-apple-darwin",
    "exiftool-aarch64-apple-darwin",
    "exiftool-x86_64-unknown-linux-gnu",
    "exiftool-aarch64-unknown-linux-gnu",
)
EXIFTOOL_WINDOWS_TARGET = "exiftool-x86_64-pc-windows-msvc.exe"
EXIFTOOL_WINDOWS_EXTRACTED_NAME = "exiftool(-k).exe"
SHARED_LIB_DIR = "lib"
SHARED_WINDOWS_FILES_DIR = "exiftool_files"

FRAGMENT_FILENAME = "latest.json"
COMBINED_FRAGMENT_SOURCES = (
    "latest-json-macos-x86_64/latest.json",
    "latest-json-macos-aarch64/latest.json",
    "latest-json-linux/latest.json",
    "latest-json-windows/latest.json",
)

MAX_ARCHIVE_TOTAL_BYTES = 1024 * 1024 * 1024  # 1 GiB
MAX_ARCHIVE_FILE_SIZE = 256 * 1024 * 1024  # 256 MiB per file
MAX_ARCHIVE_ENTRIES = 20000
MAX_COMPRESSION_RATIO = 100  # Uncompressed vs compressed bytes
