"""Tests for configuration loading."""

import pytest

from promptlens_core.api.client import DEFAULT_API_URL, DEFAULT_TIMEOUT_MS
from promptlens_core.config import load_config


@pytest.fixture(autouse=True)
def _clear_credentials(monkeypatch):
    monkeypatch.delenv("PROMPTLENS_API_KEY", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["api_url"] == DEFAULT_API_URL
    assert config["timeout_ms"] == DEFAULT_TIMEOUT_MS
    assert config["max_comment_chars"] == 65000
    assert config["system_overview"] is None
    assert config["post_review_verdict"] is True


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".promptlens.yml"
    cfg.write_text("api_url: https://staging.example.test/\ntimeout_ms: 60000\n")
    config = load_config(config_path=str(cfg))
    assert config["api_url"] == "https://staging.example.test/"
    assert config["timeout_ms"] == 60000


def test_post_review_verdict_disabled(tmp_path):
    cfg = tmp_path / ".promptlens.yml"
    cfg.write_text("post_review_verdict: false\n")
    assert load_config(config_path=str(cfg))["post_review_verdict"] is False


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".promptlens.yml"
    cfg.write_text("")
    assert load_config(config_path=str(cfg))["timeout_ms"] == DEFAULT_TIMEOUT_MS


def test_non_mapping_config_rejected(tmp_path):
    cfg = tmp_path / ".promptlens.yml"
    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_config(config_path=str(cfg))


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".promptlens.yml"
    cfg.write_text("system_overview: docs/system.md\n")
    config = load_config(config_path=str(cfg), cli_overrides={"system_overview": "docs/other.md"})
    assert config["system_overview"] == "docs/other.md"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".promptlens.yml"
    cfg.write_text("timeout_ms: 90000\n")
    config = load_config(config_path=str(cfg), cli_overrides={"timeout_ms": None})
    assert config["timeout_ms"] == 90000


def test_env_vars_loaded(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("PROMPTLENS_API_KEY", "pl-key")
    config = load_config(config_path="nonexistent.yml")
    assert config["github_token"] == "gh-token"
    assert config["api_key"] == "pl-key"


def test_credentials_not_read_from_file(tmp_path):
    cfg = tmp_path / ".promptlens.yml"
    cfg.write_text("api_key: from-file\n")
    assert load_config(config_path=str(cfg))["api_key"] is None


def test_defaults_not_shared_between_loads(tmp_path):
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["timeout_ms"] = 1
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config_b["timeout_ms"] == DEFAULT_TIMEOUT_MS


def test_comment_limit_below_notice_rejected(tmp_path):
    cfg = tmp_path / ".promptlens.yml"
    cfg.write_text("max_comment_chars: 50\n")
    with pytest.raises(ValueError, match="max_comment_chars must be at least"):
        load_config(config_path=str(cfg))
