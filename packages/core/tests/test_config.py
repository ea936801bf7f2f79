"""Tests for configuration loading."""

import json

import pytest

from ticsreview_core.config import DEFAULT_SECRETS_FILTER, ConfigError, load_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"), environ={})
    assert config.tics.project_name == "auto"
    assert config.tics.calc == "GATE"
    assert config.tics.log_level == "default"
    assert config.tics.max_comment_pages == 30
    assert config.tics.post_annotations is True
    assert config.tics.secrets_filter == DEFAULT_SECRETS_FILTER
    assert config.github.api_url == "https://api.github.com"
    assert config.github.pull_request_number is None
    assert config.debug is False


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".ticsreview.yml"
    cfg.write_text("viewer_url: https://v/tiobeweb/TiCS/api/cfg?name=default\ncalc: ALL\nlog_level: debug\n")
    config = load_config(config_path=str(cfg), environ={})
    assert config.tics.viewer_url == "https://v/tiobeweb/TiCS/api/cfg?name=default"
    assert config.tics.calc == "ALL"
    assert config.tics.debug is True
    assert config.debug is True


def test_extra_secrets_filter_terms_appended(tmp_path):
    cfg = tmp_path / ".ticsreview.yml"
    cfg.write_text("secrets_filter:\n  - MY_PASSWORD\n  - GITHUB_TOKEN\n")
    config = load_config(config_path=str(cfg), environ={})
    assert config.tics.secrets_filter == DEFAULT_SECRETS_FILTER + ["MY_PASSWORD"]


def test_unbounded_comment_pages(tmp_path):
    cfg = tmp_path / ".ticsreview.yml"
    cfg.write_text("max_comment_pages: null\n")
    assert load_config(config_path=str(cfg), environ={}).tics.max_comment_pages is None


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".ticsreview.yml"
    cfg.write_text("calc: ALL\n")
    config = load_config(config_path=str(cfg), cli_overrides={"calc": "GATE"}, environ={})
    assert config.tics.calc == "GATE"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".ticsreview.yml"
    cfg.write_text("calc: ALL\n")
    config = load_config(config_path=str(cfg), cli_overrides={"calc": None}, environ={})
    assert config.tics.calc == "ALL"


class TestEnvironment:
    def test_tokens_and_runner_values(self, tmp_path):
        env = {
            "GITHUB_TOKEN": "gh-token",
            "TICSAUTHTOKEN": "tics-token",
            "GITHUB_REPOSITORY": "owner/repo",
            "GITHUB_HEAD_REF": "feature",
            "GITHUB_EVENT_NAME": "pull_request",
            "GITHUB_API_URL": "https://ghe.example/api/v3",
            "RUNNER_DEBUG": "1",
        }
        config = load_config(config_path=str(tmp_path / "nonexistent.yml"), environ=env)
        assert config.github.token == "gh-token"
        assert config.tics.auth_token == "tics-token"
        assert config.github.repo == "owner/repo"
        assert config.tics.branch_name == "feature"
        assert config.github.event_name == "pull_request"
        assert config.github.api_url == "https://ghe.example/api/v3"
        assert config.github.debugger is True
        assert config.debug is True

    def test_pull_request_number_from_event_payload(self, tmp_path):
        event = tmp_path / "event.json"
        event.write_text(json.dumps({"pull_request": {"number": 42}}))
        config = load_config(config_path=str(tmp_path / "nonexistent.yml"), environ={"GITHUB_EVENT_PATH": str(event)})
        assert config.github.pull_request_number == 42

    def test_event_without_pull_request(self, tmp_path):
        event = tmp_path / "event.json"
        event.write_text(json.dumps({"ref": "refs/heads/main"}))
        config = load_config(config_path=str(tmp_path / "nonexistent.yml"), environ={"GITHUB_EVENT_PATH": str(event)})
        assert config.github.pull_request_number is None

    def test_config_file_wins_over_environment(self, tmp_path):
        cfg = tmp_path / ".ticsreview.yml"
        cfg.write_text("repo: other/repo\n")
        config = load_config(config_path=str(cfg), environ={"GITHUB_REPOSITORY": "owner/repo"})
        assert config.github.repo == "other/repo"


class TestValidation:
    def test_unknown_key_rejected(self, tmp_path):
        cfg = tmp_path / ".ticsreview.yml"
        cfg.write_text("modle: typo\n")
        with pytest.raises(ConfigError, match="modle"):
            load_config(config_path=str(cfg), environ={})

    def test_invalid_log_level(self, tmp_path):
        with pytest.raises(ConfigError, match="log_level"):
            load_config(str(tmp_path / "x.yml"), cli_overrides={"log_level": "verbose"}, environ={})

    def test_invalid_comment_pages(self, tmp_path):
        cfg = tmp_path / ".ticsreview.yml"
        cfg.write_text("max_comment_pages: 0\n")
        with pytest.raises(ConfigError, match="max_comment_pages"):
            load_config(config_path=str(cfg), environ={})

    def test_scalar_secrets_filter_rejected(self, tmp_path):
        cfg = tmp_path / ".ticsreview.yml"
        cfg.write_text("secrets_filter: MYKEY\n")
        with pytest.raises(ConfigError, match="secrets_filter"):
            load_config(config_path=str(cfg), environ={})

    def test_non_string_secrets_filter_term_rejected(self, tmp_path):
        cfg = tmp_path / ".ticsreview.yml"
        cfg.write_text("secrets_filter: [MYKEY, 42]\n")
        with pytest.raises(ConfigError, match="secrets_filter"):
            load_config(config_path=str(cfg), environ={})

    def test_non_mapping_file(self, tmp_path):
        cfg = tmp_path / ".ticsreview.yml"
        cfg.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(config_path=str(cfg), environ={})


def test_secrets_filter_list_is_not_shared_reference(tmp_path):
    """Mutating one config's secrets filter must not affect another."""
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"), environ={})
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"), environ={})
    config_a.tics.secrets_filter.append("EXTRA")
    assert config_b.tics.secrets_filter == DEFAULT_SECRETS_FILTER
