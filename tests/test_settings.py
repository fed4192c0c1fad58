"""Tests for config file loading."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from merge_nag.errors import ConfigError
from merge_nag.settings import (
    CONFIG_PATH_ENV,
    DEFAULT_PICKER_COUNT,
    default_config_path,
    load_settings,
)

VALID_CONFIG = """
gitlab:
  - api: https://gitlab.example.com/api/v4/
    token: glpat-one
  - api: https://gitlab.internal.example/api/v4
    token: glpat-two
slack:
  webhook: https://chat.example.com/hooks/abc
  messages:
    - "  Pretty please?  "
    - "Ship it"
mr_picker_count: 3
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "MERGE_NAG_GITLAB",
        "MERGE_NAG_SLACK",
        "MERGE_NAG_SLACK__WEBHOOK",
        "MERGE_NAG_SLACK__MESSAGES",
        "MERGE_NAG_MR_PICKER_COUNT",
        CONFIG_PATH_ENV,
    ):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


class TestLoadSettings:
    def test_valid_config(self, tmp_path):
        settings = load_settings(_write(tmp_path, VALID_CONFIG))

        assert settings.picker_limit == 3
        assert settings.slack.webhook == "https://chat.example.com/hooks/abc"
        assert settings.slack.messages == ["  Pretty please?  ", "Ship it"]
        endpoints = settings.endpoints()
        assert [endpoint.base_url for endpoint in endpoints] == [
            "https://gitlab.example.com/api/v4",
            "https://gitlab.internal.example/api/v4",
        ]
        assert endpoints[0].token.get_secret_value() == "glpat-one"

    def test_token_hidden_from_repr(self, tmp_path):
        settings = load_settings(_write(tmp_path, VALID_CONFIG))
        assert "glpat-one" not in repr(settings)

    def test_optional_keys_default(self, tmp_path):
        settings = load_settings(
            _write(
                tmp_path,
                """
                gitlab:
                  - api: https://gitlab.example.com/api/v4
                    token: glpat
                slack:
                  webhook: https://chat.example.com/hooks/abc
                """,
            ),
        )
        assert settings.slack.messages == []
        assert settings.picker_limit == DEFAULT_PICKER_COUNT

    @pytest.mark.parametrize("count", ["0", "-2", ""])
    def test_non_positive_picker_count_defaults(self, tmp_path, count):
        settings = load_settings(
            _write(
                tmp_path,
                f"""
                gitlab:
                  - api: https://gitlab.example.com/api/v4
                    token: glpat
                slack:
                  webhook: https://chat.example.com/hooks/abc
                  messages:
                mr_picker_count: {count}
                """,
            ),
        )
        assert settings.picker_limit == DEFAULT_PICKER_COUNT
        assert settings.slack.messages == []

    def test_blank_messages_dropped(self, tmp_path):
        settings = load_settings(
            _write(
                tmp_path,
                """
                gitlab:
                  - api: https://gitlab.example.com/api/v4
                    token: glpat
                slack:
                  webhook: https://chat.example.com/hooks/abc
                  messages: ["   ", "Merge me"]
                """,
            ),
        )
        assert settings.slack.messages == ["Merge me"]

    def test_unknown_keys_ignored(self, tmp_path):
        settings = load_settings(
            _write(
                tmp_path,
                VALID_CONFIG + "\nextra_section:\n  colour: blue\n",
            ),
        )
        assert settings.picker_limit == 3

    def test_env_fills_missing_webhook(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MERGE_NAG_SLACK__WEBHOOK", "https://chat.example.com/hooks/env")
        settings = load_settings(
            _write(
                tmp_path,
                """
                gitlab:
                  - api: https://gitlab.example.com/api/v4
                    token: glpat
                slack:
                  messages: ["hi"]
                """,
            ),
        )
        assert settings.slack.webhook == "https://chat.example.com/hooks/env"
        assert settings.slack.messages == ["hi"]


class TestLoadSettingsErrors:
    def test_missing_file(self, tmp_path):
        path = tmp_path / "absent.yaml"
        with pytest.raises(ConfigError) as exc_info:
            load_settings(path)
        assert exc_info.value.path == path
        assert str(path) in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(_write(tmp_path, "gitlab: [unclosed\n"))
        assert "invalid YAML" in exc_info.value.reason

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(_write(tmp_path, "- just\n- a list\n"))
        assert "mapping" in exc_info.value.reason

    def test_empty_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(_write(tmp_path, ""))
        assert "gitlab" in exc_info.value.reason

    def test_empty_gitlab_list(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(
                _write(
                    tmp_path,
                    """
                    gitlab: []
                    slack:
                      webhook: https://chat.example.com/hooks/abc
                    """,
                ),
            )
        assert "gitlab" in exc_info.value.reason

    def test_missing_webhook(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(
                _write(
                    tmp_path,
                    """
                    gitlab:
                      - api: https://gitlab.example.com/api/v4
                        token: glpat
                    slack:
                      messages: ["hi"]
                    """,
                ),
            )
        assert "slack.webhook" in exc_info.value.reason

    def test_blank_token(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(
                _write(
                    tmp_path,
                    """
                    gitlab:
                      - api: https://gitlab.example.com/api/v4
                        token: "  "
                    slack:
                      webhook: https://chat.example.com/hooks/abc
                    """,
                ),
            )
        assert "token" in exc_info.value.reason


class TestDefaultConfigPath:
    def test_home_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert default_config_path() == tmp_path / ".merge" / "config.yaml"

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(tmp_path / "custom.yaml"))
        assert default_config_path() == tmp_path / "custom.yaml"
