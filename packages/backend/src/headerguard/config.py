"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with HEADERGUARD_
prefix. Each protection has its own nested section; nested values use a
double underscore:

    HEADERGUARD_HSTS__MAX_AGE=31536000
    HEADERGUARD_NO_CACHE__ENABLED=true
    HEADERGUARD_PLATFORM_HEADERS='{"Strict-Transport-Security": "max-age=31536000"}'

Learn: Every section forbids unknown keys, and load_settings() rejects
HEADERGUARD_* variables naming no setting, so a typo like
HEADERGUARD_HSTS__MAXAGE fails at startup instead of being ignored.
The listen port also honours the plain PORT variable that most hosting
platforms set.
"""

import os
from collections.abc import Mapping
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings

from headerguard.errors import ConfigurationError
from headerguard.headers import header_name_error, header_value_error

ENV_PREFIX = "HEADERGUARD_"
NINETY_DAYS = 90 * 24 * 60 * 60


# ─── Protection sections ─────────────────────────────────


class Protection(BaseModel):
    """Base for every protection section: an on/off switch, no extras."""

    enabled: bool = True

    model_config = {"extra": "forbid", "frozen": True}


class HidePoweredBySettings(Protection):
    # Decoy for X-Powered-By; None removes the header instead
    set_to: Optional[str] = "PHP 4.2.0"


class FrameguardSettings(Protection):
    action: str = Field(default="deny", description="deny, sameorigin or allow-from")
    domain: Optional[str] = Field(None, description="Required for allow-from")


class XssFilterSettings(Protection):
    report_uri: Optional[str] = None


class NoSniffSettings(Protection):
    pass


class IeNoOpenSettings(Protection):
    pass


class HstsSettings(Protection):
    max_age: int = Field(default=NINETY_DAYS, ge=0)
    include_sub_domains: bool = True
    preload: bool = False
    # Override a header the hosting platform already sets
    force: bool = True
    # Ask the platform to stop managing the header before forcing ours
    relinquish_upstream: bool = True


class DnsPrefetchControlSettings(Protection):
    allow: bool = False


class NoCacheSettings(Protection):
    enabled: bool = False
    no_etag: bool = False


class ContentSecurityPolicySettings(Protection):
    directives: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "defaultSrc": ["'self'"],
            "scriptSrc": ["'self'", "trusted-cdn.com"],
        }
    )
    report_only: bool = False


# ─── Settings ────────────────────────────────────────────


class Settings(BaseSettings):
    """All app configuration. Set via HEADERGUARD_* env vars."""

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("port", "PORT", "HEADERGUARD_PORT"),
    )
    log_level: str = "INFO"

    # What the framework advertises in X-Powered-By before the policy runs
    server_signature: str = "Starlette"

    # Headers the hosting platform sets on its own (e.g. its HSTS default)
    platform_headers: dict[str, str] = Field(default_factory=dict)

    # Default protections
    hide_powered_by: HidePoweredBySettings = Field(default_factory=HidePoweredBySettings)
    frameguard: FrameguardSettings = Field(default_factory=FrameguardSettings)
    xss_filter: XssFilterSettings = Field(default_factory=XssFilterSettings)
    no_sniff: NoSniffSettings = Field(default_factory=NoSniffSettings)
    ie_no_open: IeNoOpenSettings = Field(default_factory=IeNoOpenSettings)
    hsts: HstsSettings = Field(default_factory=HstsSettings)
    dns_prefetch_control: DnsPrefetchControlSettings = Field(
        default_factory=DnsPrefetchControlSettings
    )

    # Opt-in protections (CSP is switched on for this app, no_cache is not)
    no_cache: NoCacheSettings = Field(default_factory=NoCacheSettings)
    content_security_policy: ContentSecurityPolicySettings = Field(
        default_factory=ContentSecurityPolicySettings
    )

    model_config = {
        "env_prefix": ENV_PREFIX,
        "env_nested_delimiter": "__",
        "extra": "forbid",
    }

    @field_validator("server_signature")
    @classmethod
    def validate_server_signature(cls, value: str) -> str:
        problem = header_value_error(value)
        if problem:
            raise ValueError(problem)
        return value

    @field_validator("platform_headers")
    @classmethod
    def validate_platform_headers(cls, value: dict[str, str]) -> dict[str, str]:
        for name, header_value in value.items():
            problem = header_name_error(name) or header_value_error(header_value)
            if problem:
                raise ValueError(problem)
        return value

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Transport security may only be switched off in development."""
        if self.environment != "development" and not self.hsts.enabled:
            raise ValueError(
                "HEADERGUARD_HSTS__ENABLED can only be false when "
                "HEADERGUARD_ENVIRONMENT=development"
            )
        return self


def unknown_env_keys(environ: Mapping[str, str]) -> list[str]:
    """HEADERGUARD_* variables that name no setting.

    pydantic-settings only reads env vars matching a field, so a typo'd
    section (HEADERGUARD_HTST__MAX_AGE) would otherwise be dropped silently.
    """
    unknown = []
    for key in environ:
        if not key.upper().startswith(ENV_PREFIX):
            continue
        field_name, _, nested = key[len(ENV_PREFIX):].lower().partition("__")
        field = Settings.model_fields.get(field_name)
        if field is None:
            unknown.append(key)
            continue
        section = field.annotation
        if nested and isinstance(section, type) and issubclass(section, BaseModel):
            if nested.split("__", 1)[0] not in section.model_fields:
                unknown.append(key)
    return sorted(unknown)


def load_settings(**overrides) -> Settings:
    """Build Settings from env (plus overrides), failing as ConfigurationError."""
    unknown = unknown_env_keys(os.environ)
    if unknown:
        raise ConfigurationError(f"Unknown settings in environment: {', '.join(unknown)}")
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings:\n{e}") from e
