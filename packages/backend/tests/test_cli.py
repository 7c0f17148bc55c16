"""CLI tests — click's CliRunner, no server started."""

from unittest.mock import patch

from click.testing import CliRunner

from headerguard.cli.main import main


def test_headers_prints_enabled_rules():
    result = CliRunner().invoke(main, ["headers"])
    assert result.exit_code == 0, result.output
    assert "X-Frame-Options" in result.output
    assert "DENY" in result.output
    assert "Cache-Control" not in result.output
    assert "CSP leaves unrestricted: base-uri, form-action, frame-ancestors" in result.output


def test_headers_all_includes_disabled():
    result = CliRunner().invoke(main, ["headers", "--all"])
    assert result.exit_code == 0, result.output
    assert "Cache-Control" in result.output


def test_check_ok():
    result = CliRunner().invoke(main, ["check"])
    assert result.exit_code == 0, result.output
    assert "OK" in result.output


def test_check_fails_on_bad_config():
    result = CliRunner().invoke(
        main, ["check"], env={"HEADERGUARD_FRAMEGUARD__ACTION": "maybe"}
    )
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_check_fails_on_unknown_key():
    result = CliRunner().invoke(
        main, ["check"], env={"HEADERGUARD_HSTS": '{"maxAge": 10}'}
    )
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_serve_refuses_to_start_on_bad_config():
    with patch("uvicorn.run") as run:
        result = CliRunner().invoke(
            main, ["serve"], env={"HEADERGUARD_FRAMEGUARD__ACTION": "maybe"}
        )
    assert result.exit_code == 1
    run.assert_not_called()


def test_serve_uses_port_option():
    with patch("uvicorn.run") as run:
        result = CliRunner().invoke(main, ["serve", "--port", "4321"])
    assert result.exit_code == 0, result.output
    assert "listening on port 4321" in result.output
    assert run.call_args.kwargs["port"] == 4321


PLATFORM_ENV = {"HEADERGUARD_PLATFORM_HEADERS": '{"Strict-Transport-Security": "max-age=31536000"}'}


def test_check_relinquishes_platform_hsts():
    result = CliRunner().invoke(main, ["check"], env=PLATFORM_ENV)
    assert result.exit_code == 0, result.output
    assert "still managed by the platform" not in result.output


def test_check_warns_when_platform_keeps_forced_header():
    env = {**PLATFORM_ENV, "HEADERGUARD_HSTS__RELINQUISH_UPSTREAM": "false"}
    result = CliRunner().invoke(main, ["check"], env=env)
    assert result.exit_code == 0, result.output
    assert "Strict-Transport-Security is still managed by the platform" in result.output


def test_check_fails_on_misspelled_section():
    result = CliRunner().invoke(main, ["check"], env={"HEADERGUARD_HTST__MAX_AGE": "10"})
    assert result.exit_code == 1
    assert "HEADERGUARD_HTST__MAX_AGE" in result.output
