"""Settings tests — env loading, nested sections, unknown keys."""

import pytest
from pydantic import ValidationError

from headerguard.config import NINETY_DAYS, Settings, load_settings
from headerguard.errors import ConfigurationError


def test_defaults():
    s = Settings()
    assert s.port == 3000
    assert s.hsts.max_age == NINETY_DAYS == 7776000
    assert s.hsts.force is True
    assert s.no_cache.enabled is False
    assert s.content_security_policy.enabled is True
    assert s.hide_powered_by.set_to == "PHP 4.2.0"


def test_port_from_plain_env(monkeypatch):
    monkeypatch.setenv("PORT", "8081")
    assert Settings().port == 8081


def test_port_from_prefixed_env(monkeypatch):
    monkeypatch.setenv("HEADERGUARD_PORT", "8082")
    assert Settings().port == 8082


def test_port_keyword():
    assert Settings(port=9000).port == 9000


def test_nested_env(monkeypatch):
    monkeypatch.setenv("HEADERGUARD_HSTS__MAX_AGE", "31536000")
    monkeypatch.setenv("HEADERGUARD_NO_CACHE__ENABLED", "true")
    s = Settings()
    assert s.hsts.max_age == 31536000
    assert s.no_cache.enabled is True


def test_platform_headers_from_json_env(monkeypatch):
    monkeypatch.setenv(
        "HEADERGUARD_PLATFORM_HEADERS",
        '{"Strict-Transport-Security": "max-age=31536000"}',
    )
    assert Settings().platform_headers == {"Strict-Transport-Security": "max-age=31536000"}


def test_unknown_section_key_rejected():
    with pytest.raises(ConfigurationError, match="Invalid settings"):
        load_settings(hsts={"maxAge": 10})


def test_unknown_top_level_key_rejected():
    with pytest.raises(ConfigurationError):
        load_settings(helmet=True)


@pytest.mark.parametrize(
    "env",
    [
        {"HEADERGUARD_HTST__MAX_AGE": "10"},
        {"HEADERGUARD_FRAMEGUARDS": '{"action": "deny"}'},
        {"HEADERGUARD_HSTS__MAXAGE": "10"},
    ],
)
def test_unknown_env_settings_rejected(monkeypatch, env):
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    with pytest.raises(ConfigurationError, match="Unknown settings in environment"):
        load_settings()


def test_known_env_settings_accepted(monkeypatch):
    monkeypatch.setenv("HEADERGUARD_PORT", "8083")
    monkeypatch.setenv("HEADERGUARD_HSTS__MAX_AGE", "10")
    monkeypatch.setenv("HEADERGUARD_CONTENT_SECURITY_POLICY__REPORT_ONLY", "true")
    s = load_settings()
    assert s.port == 8083
    assert s.hsts.max_age == 10
    assert s.content_security_policy.report_only is True


@pytest.mark.parametrize("signature", ["PHP \u2603", "Starlette\x7f", "a\r\nX-Injected: 1"])
def test_bad_server_signature_rejected(signature):
    with pytest.raises(ConfigurationError, match="server_signature"):
        load_settings(server_signature=signature)


@pytest.mark.parametrize(
    "headers",
    [{"Bad Name": "x"}, {"X-Platform": "caf\u00e9 \u2603"}, {"X-Platform": "a\nb"}],
)
def test_bad_platform_headers_rejected(headers):
    with pytest.raises(ConfigurationError, match="platform_headers"):
        load_settings(platform_headers=headers)


def test_negative_max_age_rejected():
    with pytest.raises(ConfigurationError):
        load_settings(hsts={"max_age": -1})


def test_sections_are_frozen():
    s = Settings()
    with pytest.raises(ValidationError):
        s.hsts.max_age = 1


def test_hsts_cannot_be_disabled_outside_development():
    with pytest.raises(ConfigurationError, match="HEADERGUARD_HSTS__ENABLED"):
        load_settings(environment="production", hsts={"enabled": False})


def test_hsts_can_be_disabled_in_development():
    assert load_settings(hsts={"enabled": False}).hsts.enabled is False
