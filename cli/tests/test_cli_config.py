"""Tests for CLI config: environment resolution and per-environment values."""

from __future__ import annotations

import json

from leitor_cli.config import DEFAULT_API_URL, Config
from reader.kernel.presentation import ReadingPreferences


class TestApiUrl:
    def test_fallback(self, config):
        assert config.api_url == DEFAULT_API_URL

    def test_flag_beats_config_default(self, tmp_path):
        base = Config(config_dir=tmp_path)
        base.default_url = "https://prod.example.org/"
        assert Config(config_dir=tmp_path).api_url == "https://prod.example.org"
        assert Config("http://127.0.0.1:9000/", config_dir=tmp_path).api_url == "http://127.0.0.1:9000"

    def test_env_beats_flag(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEITOR_API_URL", "https://env.example.org")
        assert Config("http://flag", config_dir=tmp_path).api_url == "https://env.example.org"


class TestEnvironments:
    def test_values_are_per_url(self, tmp_path):
        local = Config("http://localhost:8000", config_dir=tmp_path)
        local.api_key = "local-key"
        local.default_version = "ara"

        prod = Config("https://prod.example.org", config_dir=tmp_path)
        assert prod.api_key is None
        assert prod.default_version == "nvi"

        again = Config("http://localhost:8000", config_dir=tmp_path)
        assert again.api_key == "local-key"
        assert again.default_version == "ara"

    def test_env_key_overrides_saved_key(self, config, monkeypatch):
        config.api_key = "saved"
        monkeypatch.setenv("LEITOR_API_KEY", "from-env")
        assert config.api_key == "from-env"
        assert config.is_authenticated

    def test_preferences_round_trip(self, config):
        config.preferences = ReadingPreferences(verse_by_verse=True, width="wide")
        stored = json.loads(config.config_file.read_text())
        assert stored["environments"][DEFAULT_API_URL]["preferences"] == {"verse_by_verse": True, "width": "wide"}
        assert Config(config_dir=config.config_dir).preferences.width == "wide"

    def test_file_is_owner_only(self, config):
        config.api_key = "k"
        assert config.config_file.stat().st_mode & 0o777 == 0o600

    def test_corrupt_file_is_ignored(self, tmp_path):
        (tmp_path / "config.json").write_text("{not json")
        config = Config(config_dir=tmp_path)
        assert config.api_key is None
        assert config.list_environments() == []

    def test_clear(self, tmp_path):
        a = Config("http://a", config_dir=tmp_path)
        a.api_key = "ka"
        b = Config("http://b", config_dir=tmp_path)
        b.api_key = "kb"

        assert [e["url"] for e in b.list_environments()] == ["http://a", "http://b"]
        b.clear_environment()
        assert [e["url"] for e in b.list_environments()] == ["http://a"]
        b.clear_all()
        assert not b.config_file.exists()
