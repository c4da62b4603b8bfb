"""Tests for configuration loading."""

import pytest

from reviewdesk_core.config import DEFAULT_CONFIG_PATH, load_config, resolve_config_path


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["store"] == "sqlite"
    assert config["store_path"] == ".reviewdesk.db"
    assert config["model"] == "anthropic"
    assert config["active_window_hours"] == 24
    assert config["draft_retention_days"] == 30
    assert config["reviewer_tag"] == "client"


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".reviewdesk.yml"
    cfg.write_text("store: gist\ngist_id: abc123\nactive_window_hours: 48\n")
    config = load_config(config_path=str(cfg))
    assert config["store"] == "gist"
    assert config["gist_id"] == "abc123"
    assert config["active_window_hours"] == 48


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".reviewdesk.yml"
    cfg.write_text("")
    assert load_config(config_path=str(cfg))["store"] == "sqlite"


def test_non_mapping_config_file_raises(tmp_path):
    cfg = tmp_path / ".reviewdesk.yml"
    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="YAML mapping"):
        load_config(config_path=str(cfg))


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".reviewdesk.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "anthropic"})
    assert config["model"] == "anthropic"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".reviewdesk.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": None})
    assert config["model"] == "openai"


def test_env_vars_loaded(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ant-key")
    monkeypatch.setenv("OPENAI_API_KEY", "oai-key")
    config = load_config(config_path="nonexistent.yml")
    assert config["github_token"] == "gh-token"
    assert config["anthropic_api_key"] == "ant-key"
    assert config["openai_api_key"] == "oai-key"


def test_config_path_resolution(monkeypatch):
    monkeypatch.delenv("REVIEWDESK_CONFIG", raising=False)
    assert resolve_config_path() == DEFAULT_CONFIG_PATH
    monkeypatch.setenv("REVIEWDESK_CONFIG", "/etc/reviewdesk.yml")
    assert resolve_config_path() == "/etc/reviewdesk.yml"
    assert resolve_config_path("local.yml") == "local.yml"
