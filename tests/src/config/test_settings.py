"""
Tests for environment-driven settings.
"""

import logging

import pytest

from src.config.settings import (
    DEFAULT_STATE_TOKEN_MAX_CHARS,
    Settings,
)
from src.lib.exceptions import ConfigurationError


def test_defaults_from_empty_env():
    settings = Settings.from_env({})
    assert settings.catalog_version == "v2"
    assert settings.form_variant == "extended"
    assert settings.state_token_max_chars == DEFAULT_STATE_TOKEN_MAX_CHARS == 3000
    assert settings.signature_tolerance_seconds == 300
    assert settings.dedup_ttl_seconds == 600
    assert settings.slack_api_timeout == 10.0
    assert settings.slash_command == "/maker-biweekly-update"
    assert not settings.is_production


def test_values_from_env():
    settings = Settings.from_env(
        {
            "SLACK_BOT_TOKEN": "xoxb-1",
            "SLACK_SIGNING_SECRET": "s",
            "SLACK_API_BASE_URL": "https://slack.test/api/",
            "MAKER_ENVIRONMENT": "production",
            "MAKER_CATALOG_VERSION": "v1",
            "MAKER_FORM_VARIANT": "classic",
            "STATE_TOKEN_MAX_CHARS": "2000",
            "SLACK_API_TIMEOUT": "2.5",
        }
    )
    assert settings.slack_api_base_url == "https://slack.test/api"
    assert settings.is_production
    assert settings.catalog.version == "v1"
    assert settings.variant.name == "classic"
    assert settings.state_token_max_chars == 2000
    assert settings.slack_api_timeout == 2.5


@pytest.mark.parametrize(
    "env",
    [
        {"MAKER_CATALOG_VERSION": "v0"},
        {"MAKER_FORM_VARIANT": "fancy"},
        {"STATE_TOKEN_MAX_CHARS": "lots"},
        {"SLACK_API_TIMEOUT": "soon"},
    ],
)
def test_invalid_values(env):
    with pytest.raises(ConfigurationError):
        Settings.from_env(env)


def test_missing_secrets_fail_in_production():
    with pytest.raises(ConfigurationError, match="SLACK_SIGNING_SECRET"):
        Settings(environment="production", slack_bot_token="xoxb-1").validate_secrets()


def test_missing_secrets_warn_in_development(caplog):
    with caplog.at_level(logging.WARNING, logger="src.config.settings"):
        Settings().validate_secrets()
    assert "SLACK_BOT_TOKEN" in caplog.text


def test_complete_secrets_pass():
    Settings(environment="production", slack_bot_token="x", slack_signing_secret="y").validate_secrets()
