"""headerguard CLI — run the server and inspect the header policy.

Usage:
    headerguard serve                       # Listen on $PORT (default 3000)
    headerguard serve --port 8080           # Explicit port
    headerguard headers                     # Print the effective rule table
    headerguard check                       # Validate config, exit 1 if broken
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import click
import structlog

from headerguard import __version__
from headerguard.config import Settings, load_settings
from headerguard.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )


def _load_or_exit(**overrides) -> Settings:
    try:
        return load_settings(**overrides)
    except ConfigurationError as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.secho(line, dim=not row.get("enabled", True))


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="headerguard")
def main():
    """headerguard — security response headers for every route."""


@main.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", "-p", type=int, default=None, help="Port (default $PORT or 3000)")
def serve(host: Optional[str], port: Optional[int]):
    """Build the app and serve it with uvicorn.

    The policy is built before binding, so a configuration error exits
    without ever accepting a connection.
    """
    import uvicorn

    overrides = {}
    if port is not None:
        overrides["port"] = port
    settings = _load_or_exit(**overrides)
    _configure_logging(settings.log_level)

    try:
        from headerguard.main import create_app

        app = create_app(settings)
    except ConfigurationError as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(f"Your app is listening on port {settings.port}")
    uvicorn.run(
        app,
        host=host or settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        server_header=False,
    )


@main.command()
@click.option("--all", "show_all", is_flag=True, help="Include disabled rules")
def headers(show_all: bool):
    """Print the header rules this configuration produces."""
    from headerguard.platform import PlatformHeaders
    from headerguard.policy import build_policy

    settings = _load_or_exit()
    _configure_logging("WARNING")
    try:
        policy = build_policy(settings, upstream=PlatformHeaders(settings.platform_headers))
    except ConfigurationError as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        sys.exit(1)

    rows = policy.describe()
    if not show_all:
        rows = [r for r in rows if r["enabled"]]
    _print_table(rows, [
        ("HEADER", "name", 34),
        ("ACTION", "action", 14),
        ("SOURCE", "source", 24),
        ("VALUE", "value", 60),
    ])
    if policy.csp_gaps:
        click.echo()
        click.secho(
            "CSP leaves unrestricted: " + ", ".join(policy.csp_gaps),
            fg="yellow",
        )


@main.command()
def check():
    """Validate settings and policy; exit 1 on the first error.

    The policy is built against the configured platform headers, so a
    forced header the platform would still overwrite is reported.
    """
    from headerguard.platform import PlatformHeaders
    from headerguard.policy import RuleAction, build_policy

    settings = _load_or_exit()
    _configure_logging("WARNING")
    platform = PlatformHeaders(settings.platform_headers)
    try:
        policy = build_policy(settings, upstream=platform)
    except ConfigurationError as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        sys.exit(1)

    for rule in policy.enabled_rules():
        if rule.action is RuleAction.FORCE_SET and platform.manages(rule.name):
            click.secho(
                f"Warning: {rule.name} is still managed by the platform; "
                f"the {rule.source} value will be overwritten",
                fg="yellow",
            )
    click.secho(f"OK — {len(policy.enabled_rules())} header rules enabled", fg="green")


if __name__ == "__main__":
    main()
