"""Configuration loading for merge-nag.

The config lives in ``$HOME/.merge/config.yaml``::

    gitlab:
      - api: https://gitlab.example.com/api/v4
        token: glpat-xxxx
    slack:
      webhook: https://chat.example.com/hooks/abc
      messages:
        - "Pretty please?"
        - "It's been a while..."
    mr_picker_count: 5

Values missing from the file may also be supplied through ``MERGE_NAG_``
prefixed environment variables (``MERGE_NAG_SLACK__WEBHOOK`` and so on).
"""
from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from merge_nag.errors import ConfigError
from merge_nag.gitlab import UpstreamEndpoint

CONFIG_PATH_ENV = "MERGE_NAG_CONFIG"
DEFAULT_PICKER_COUNT = 5


def default_config_path() -> Path:
    """Return the config path, honouring the MERGE_NAG_CONFIG override."""
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".merge" / "config.yaml"


class GitLabInstance(BaseModel):
    """One configured GitLab API endpoint and its access token."""

    api: str = Field(min_length=1)
    token: SecretStr

    @field_validator("api")
    @classmethod
    def strip_api(cls, value: str) -> str:
        """Normalise the API base URL."""
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("api must not be empty")
        return value

    @field_validator("token")
    @classmethod
    def require_token(cls, value: SecretStr) -> SecretStr:
        """Reject blank tokens."""
        if not value.get_secret_value().strip():
            raise ValueError("token must not be empty")
        return value


class SlackSettings(BaseModel):
    """Chat webhook target and the nag phrases to pick from."""

    webhook: str = Field(min_length=1)
    messages: list[str] = Field(default_factory=list)

    @field_validator("messages", mode="before")
    @classmethod
    def default_messages(cls, value: object) -> object:
        """Treat an empty ``messages:`` key as no phrases."""
        if value is None:
            return []
        return value

    @field_validator("messages")
    @classmethod
    def drop_blank_messages(cls, value: list[str]) -> list[str]:
        """Drop phrases that are empty once trimmed."""
        return [message for message in value if message.strip()]


class Settings(BaseSettings):
    """Config-file backed settings, with environment fallbacks."""

    model_config = SettingsConfigDict(
        env_prefix="MERGE_NAG_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    gitlab: list[GitLabInstance] = Field(min_length=1)
    slack: SlackSettings
    mr_picker_count: int = DEFAULT_PICKER_COUNT

    @field_validator("mr_picker_count", mode="before")
    @classmethod
    def default_missing_picker_count(cls, value: object) -> object:
        """Treat an empty ``mr_picker_count:`` key as unset."""
        if value is None:
            return DEFAULT_PICKER_COUNT
        return value

    @field_validator("mr_picker_count")
    @classmethod
    def positive_picker_count(cls, value: int) -> int:
        """Fall back to the default for zero or negative counts."""
        if value <= 0:
            return DEFAULT_PICKER_COUNT
        return value

    @property
    def picker_limit(self) -> int:
        """Return the number of merge requests offered in the picker."""
        return self.mr_picker_count

    def endpoints(self) -> list[UpstreamEndpoint]:
        """Return the configured upstreams as fetcher endpoints."""
        return [
            UpstreamEndpoint(
                base_url=instance.api,
                token=instance.token,
            )
            for instance in self.gitlab
        ]


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic validation error into a single line."""
    parts: list[str] = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "config"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


def load_settings(path: Path) -> Settings:
    """Load and validate settings from a YAML file."""
    if not path.is_file():
        raise ConfigError(path, "file not found")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(path, exc.strerror or str(exc)) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(path, f"invalid YAML: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(path, "top-level document must be a mapping")
    try:
        return Settings(**{str(key): value for key, value in raw.items()})
    except ValidationError as exc:
        raise ConfigError(path, describe_validation_error(exc)) from exc
