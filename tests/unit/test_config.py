"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.config.loader import _deep_merge, load_config
from src.config.settings import Settings
from src.utils.errors import ConfigurationError


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self) -> None:
        settings = _settings()
        assert settings.rawg_base_url == "https://api.rawg.io/api"
        assert settings.is_dev_auth() is True

    def test_env_variables_are_read(self, monkeypatch) -> None:
        monkeypatch.setenv("RAWG_API_KEY", "from-env")
        monkeypatch.setenv("AUTH_JWT_SECRET", "s3cret")
        settings = _settings()
        assert settings.rawg_api_key == "from-env"
        assert settings.is_dev_auth() is False

    def test_llm_provider_order(self) -> None:
        settings = _settings(openai_api_key="sk", anthropic_api_key="ak")
        assert settings.get_available_llm_providers() == ["openai", "anthropic", "ollama"]
        assert _settings(ollama_base_url="").get_available_llm_providers() == []


class TestLoadConfig:
    def test_missing_file_yields_defaults(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=_settings())
        assert config["recommendations"]["count"] == 6
        assert config["recommendations"]["enrichment_timeout"] == 2.0
        assert config["catalog"]["browse_page_size"] == 40
        assert config["catalog"]["top_list_size"] == 50

    def test_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("recommendations:\n  count: 8\nchat:\n  max_message_length: 200\n")

        config = load_config(str(path), settings=_settings())

        assert config["recommendations"]["count"] == 8
        assert config["recommendations"]["temperature"] == 0.8
        assert config["chat"]["max_message_length"] == 200

    def test_settings_are_merged(self, tmp_path: Path) -> None:
        settings = _settings(rawg_api_key="k", database_path="/tmp/x.db")
        config = load_config(str(tmp_path / "absent.yaml"), settings=settings)

        assert config["catalog"]["configured"] is True
        assert config["storage"]["database_path"] == "/tmp/x.db"

    def test_runtime_keys_come_from_settings(self, tmp_path: Path) -> None:
        settings = _settings(
            app_host="0.0.0.0",
            app_env="production",
            app_port=9000,
            log_level="DEBUG",
            openai_api_key="",
            anthropic_api_key="",
        )
        config = load_config(str(tmp_path / "absent.yaml"), settings=settings)

        assert config["app"] == {"host": "0.0.0.0", "port": 9000, "env": "production"}
        assert config["logging"]["level"] == "DEBUG"
        assert config["llm"]["available_providers"] == ["ollama"]

    def test_malformed_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("recommendations: [count: 6\n")

        with pytest.raises(ConfigurationError, match="Malformed YAML"):
            load_config(str(path), settings=_settings())

    def test_non_mapping_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            load_config(str(path), settings=_settings())

    def test_repo_config_file_loads(self, project_root: Path) -> None:
        config = load_config(str(project_root / "config" / "config.yaml"), settings=_settings())
        assert config["explain"]["max_tokens"] == 200


class TestDeepMerge:
    def test_nested_merge(self) -> None:
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        _deep_merge(base, {"a": {"c": 20}, "e": 5})
        assert base == {"a": {"b": 1, "c": 20}, "d": 3, "e": 5}
