"""Tests for ConfigManager layering."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from logishare.settings import ConfigManager, default_app_dir

_KEYS = (
    "LOGISHARE_ENV",
    "LOGISHARE_APP_DIR",
    "LOGISHARE_PACKAGE_EXT",
    "LOGISHARE_LOG_LEVEL",
    "LOGISHARE_HASH_CHUNK",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfigManager:
    def test_defaults(self, tmp_path: Path):
        config = ConfigManager().load_config(tmp_path)
        assert config["LOGISHARE_ENV"] == "development"
        assert config["LOGISHARE_PACKAGE_EXT"] == "logicx"
        assert config["LOGISHARE_HASH_CHUNK"] == str(1024 * 1024)
        assert config["LOGISHARE_APP_DIR"] == str(tmp_path)

    def test_profile(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("LOGISHARE_ENV", "testing")
        config = ConfigManager().load_config(tmp_path)
        assert config["LOGISHARE_HASH_CHUNK"] == "4096"

        monkeypatch.setenv("LOGISHARE_ENV", "production")
        assert ConfigManager().load_config(tmp_path)["LOGISHARE_LOG_LEVEL"] == "WARNING"

    def test_config_json_overrides_profile(self, tmp_path: Path):
        (tmp_path / "config.json").write_text(
            json.dumps({"LOGISHARE_PACKAGE_EXT": "band", "LOGISHARE_LOG_LEVEL": "ERROR"}),
            encoding="utf-8",
        )
        config = ConfigManager().load_config(tmp_path)
        assert config["LOGISHARE_PACKAGE_EXT"] == "band"
        assert config["LOGISHARE_LOG_LEVEL"] == "ERROR"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch):
        (tmp_path / "config.json").write_text(
            json.dumps({"LOGISHARE_PACKAGE_EXT": "band"}), encoding="utf-8",
        )
        monkeypatch.setenv("LOGISHARE_PACKAGE_EXT", "song")
        assert ConfigManager().load_config(tmp_path)["LOGISHARE_PACKAGE_EXT"] == "song"

    def test_bad_config_json_ignored(self, tmp_path: Path):
        (tmp_path / "config.json").write_text("{oops", encoding="utf-8")
        assert ConfigManager().load_config(tmp_path)["LOGISHARE_PACKAGE_EXT"] == "logicx"

    def test_app_dir_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("LOGISHARE_APP_DIR", str(tmp_path / "env-app"))
        config = ConfigManager().load_config()
        assert config["LOGISHARE_APP_DIR"] == str(tmp_path / "env-app")

    def test_explicit_app_dir_wins(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("LOGISHARE_APP_DIR", str(tmp_path / "env-app"))
        config = ConfigManager().load_config(tmp_path / "explicit")
        assert config["LOGISHARE_APP_DIR"] == str(tmp_path / "explicit")

    def test_default_app_dir_xdg(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr("sys.platform", "linux")
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        assert default_app_dir() == tmp_path / "logishare"

    def test_generate_template(self, tmp_path: Path):
        path = ConfigManager().generate_config_template(tmp_path / "app")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert set(data) == set(_KEYS)
        assert data["LOGISHARE_APP_DIR"] == str(tmp_path / "app")

        # the generated file feeds straight back into load_config
        config = ConfigManager().load_config(tmp_path / "app")
        assert config["LOGISHARE_PACKAGE_EXT"] == "logicx"
