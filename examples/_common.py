"""
Shared helpers for headerguard examples.

Points the examples at a running server and checks it is reachable
before they start poking at response headers.
"""

import os
import sys

import httpx

BASE = os.environ.get("AUDIT_BASE_URL", "http://localhost:3000").rstrip("/")


def check_backend() -> dict:
    """Verify the server is reachable and return its health payload."""
    try:
        resp = httpx.get(f"{BASE}/_api/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Server not reachable at {BASE}")
        print("Start it with:  headerguard serve")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print(f"Server {BASE} is up (version {health['version']})")
    return health


def fetch_policy() -> dict:
    """The rule table the server started with."""
    resp = httpx.get(f"{BASE}/_api/policy", timeout=5)
    resp.raise_for_status()
    return resp.json()
