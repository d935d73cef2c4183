"""
Runtime configuration for the Maker Update bot.

All settings come from environment variables and are read once into an
immutable ``Settings`` value. Secrets are validated at startup (fail-fast
in production, warn in development).

Environment:
    SLACK_BOT_TOKEN             Bot token for the Slack Web API
    SLACK_SIGNING_SECRET        Shared secret for request signatures
    SLACK_API_BASE_URL          Web API base URL (default https://slack.com/api)
    SLACK_API_TIMEOUT           Per-call timeout in seconds (default 10)
    MAKER_ENVIRONMENT           development | production
    MAKER_DEV_MODE              "1" for console logging
    LOG_LEVEL                   Root log level (default INFO)
    REDIS_URL                   Redis for the idempotency cache
    MAKER_CATALOG_VERSION       Option catalog version (default v2)
    MAKER_FORM_VARIANT          classic | extended (default extended)
    STATE_TOKEN_MAX_CHARS       Transport limit for the state token (default 3000)
    SIGNATURE_TOLERANCE_SECONDS Replay window (default 300)
    DEDUP_TTL_SECONDS           Idempotency key lifetime (default 600)
    MAKER_SLASH_COMMAND         Slash command name (default /maker-biweekly-update)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from src.config.catalogs import (
    DEFAULT_CATALOG_VERSION,
    DEFAULT_FORM_VARIANT,
    Catalog,
    FormVariant,
    get_catalog,
    get_form_variant,
)
from src.lib.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Slack caps view private_metadata at 3000 characters.
DEFAULT_STATE_TOKEN_MAX_CHARS = 3000
DEFAULT_SIGNATURE_TOLERANCE_SECONDS = 300
DEFAULT_DEDUP_TTL_SECONDS = 600
DEFAULT_SLACK_API_TIMEOUT = 10.0
DEFAULT_SLACK_API_BASE_URL = "https://slack.com/api"
DEFAULT_SLASH_COMMAND = "/maker-biweekly-update"


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    slack_bot_token: str = ""
    slack_signing_secret: str = ""
    slack_api_base_url: str = DEFAULT_SLACK_API_BASE_URL
    slack_api_timeout: float = DEFAULT_SLACK_API_TIMEOUT
    environment: str = "development"
    dev_mode: bool = False
    log_level: str = "INFO"
    redis_url: str = "redis://localhost:6379/0"
    catalog_version: str = DEFAULT_CATALOG_VERSION
    form_variant: str = DEFAULT_FORM_VARIANT
    state_token_max_chars: int = DEFAULT_STATE_TOKEN_MAX_CHARS
    signature_tolerance_seconds: int = DEFAULT_SIGNATURE_TOLERANCE_SECONDS
    dedup_ttl_seconds: int = DEFAULT_DEDUP_TTL_SECONDS
    slash_command: str = DEFAULT_SLASH_COMMAND

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def catalog(self) -> Catalog:
        return get_catalog(self.catalog_version)

    @property
    def variant(self) -> FormVariant:
        return get_form_variant(self.form_variant)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (defaults to os.environ)

        Raises:
            ConfigurationError: On malformed numbers or unknown catalog/variant
        """
        if env is None:
            env = os.environ

        settings = cls(
            slack_bot_token=env.get("SLACK_BOT_TOKEN", ""),
            slack_signing_secret=env.get("SLACK_SIGNING_SECRET", ""),
            slack_api_base_url=env.get("SLACK_API_BASE_URL", DEFAULT_SLACK_API_BASE_URL).rstrip("/"),
            slack_api_timeout=_float_env(env, "SLACK_API_TIMEOUT", DEFAULT_SLACK_API_TIMEOUT),
            environment=env.get("MAKER_ENVIRONMENT", "development"),
            dev_mode=env.get("MAKER_DEV_MODE", "0") == "1",
            log_level=env.get("LOG_LEVEL", "INFO"),
            redis_url=env.get("REDIS_URL", "redis://localhost:6379/0"),
            catalog_version=env.get("MAKER_CATALOG_VERSION", DEFAULT_CATALOG_VERSION),
            form_variant=env.get("MAKER_FORM_VARIANT", DEFAULT_FORM_VARIANT),
            state_token_max_chars=_int_env(env, "STATE_TOKEN_MAX_CHARS", DEFAULT_STATE_TOKEN_MAX_CHARS),
            signature_tolerance_seconds=_int_env(
                env, "SIGNATURE_TOLERANCE_SECONDS", DEFAULT_SIGNATURE_TOLERANCE_SECONDS
            ),
            dedup_ttl_seconds=_int_env(env, "DEDUP_TTL_SECONDS", DEFAULT_DEDUP_TTL_SECONDS),
            slash_command=env.get("MAKER_SLASH_COMMAND", DEFAULT_SLASH_COMMAND),
        )
        # Resolve eagerly so a bad name fails at startup, not on first request.
        _ = settings.catalog
        _ = settings.variant
        return settings

    def validate_secrets(self) -> None:
        """
        Fail fast on missing Slack secrets in production.

        Raises:
            ConfigurationError: If a secret is missing and environment is production
        """
        missing = [
            name
            for name, value in (
                ("SLACK_BOT_TOKEN", self.slack_bot_token),
                ("SLACK_SIGNING_SECRET", self.slack_signing_secret),
            )
            if not value
        ]
        if not missing:
            return
        if self.is_production:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        logger.warning(
            "Slack secrets not set (%s); requests will be rejected until configured",
            ", ".join(missing),
        )


__all__ = ["Settings"]
