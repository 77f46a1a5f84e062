from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_path() -> None:
    """Guarantee the repository root is discoverable for absolute imports."""

    root = Path(__file__).resolve().parent.parent
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


_ensure_project_root_on_path()

from app.config import reset_release_config_cache  # noqa: E402
from app.version import get_app_version  # noqa: E402
from shared import logging_config  # noqa: E402


@pytest.fixture(autouse=True)
def _preferences_path_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory):
    """Isolate preference and log writes so tests never touch real user data."""

    pref_dir = tmp_path_factory.mktemp("prefs")
    monkeypatch.setenv("METADATAZERO_PREFERENCES_PATH", str(pref_dir / "preferences.json"))
    monkeypatch.setenv("METADATAZERO_LOG_DIR", str(tmp_path_factory.mktemp("logs")))
    yield


@pytest.fixture(autouse=True)
def _release_environment(monkeypatch: pytest.MonkeyPatch):
    """Start each test without cached configuration or version overrides."""

    for name in (
        "METADATAZERO_APP_VERSION",
        "GITHUB_REF_NAME",
        "METADATAZERO_RELEASE_CONFIG",
        "METADATAZERO_PROJECT_ROOT",
        "METADATAZERO_UPDATE_MANIFEST",
        "APPIMAGE",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_release_config_cache()
    get_app_version.cache_clear()
    yield
    reset_release_config_cache()
    get_app_version.cache_clear()
    logging_config._reset_for_tests()
