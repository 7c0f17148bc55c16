#!/usr/bin/env python3
"""
headerguard header audit — compare what the server says it sends with
what actually arrives on a few different routes.

Run with: python examples/audit_headers.py

Requires: pip install httpx
Server must be running: http://localhost:3000 (or set AUDIT_BASE_URL)
"""

import sys

import httpx

from _common import BASE, check_backend, fetch_policy

PATHS = ["/", "/style.css", "/_api/health", "/_api/no-such-route"]


def main():
    check_backend()
    policy = fetch_policy()

    # ── Expected header values from the enabled rules ─────────────
    expected = {}
    removed = set()
    for rule in policy["rules"]:
        if not rule["enabled"]:
            continue
        key = rule["name"].lower()
        if rule["action"] == "remove":
            removed.add(key)
            expected.pop(key, None)
        else:
            expected[key] = rule["value"]

    failures = 0
    with httpx.Client(base_url=BASE, timeout=5) as client:
        for path in PATHS:
            resp = client.get(path)
            print(f"\n{path}  ({resp.status_code})")
            for name, value in expected.items():
                got = resp.headers.get(name)
                mark = "✓" if got == value else "✗"
                failures += got != value
                print(f"  {mark} {name}: {got}")
            for name in removed:
                if name in resp.headers:
                    failures += 1
                    print(f"  ✗ {name} should be absent, got {resp.headers[name]}")

    if policy["csp_gaps"]:
        print("\nCSP leaves unrestricted: " + ", ".join(policy["csp_gaps"]))

    if failures:
        print(f"\n{failures} header mismatch(es)")
        sys.exit(1)
    print("\nAll routes carry the full header set.")


if __name__ == "__main__":
    main()
