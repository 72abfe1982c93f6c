"""Deployment preflight for the stock ledger service.

Usage:
    python scripts/db_preflight.py

Reads the same environment variables as ``stockledger.config`` and exits
non-zero when a required control fails.
"""

from __future__ import annotations

import os
import sys


def _bool_env(env, name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def collect_checks(env=None) -> list[tuple[str, bool, str]]:
    env = os.environ if env is None else env

    environment = env.get("ENVIRONMENT", "development").strip().lower()
    database_url = env.get("DATABASE_URL", "sqlite:///./stockledger.db")
    auto_create_tables = _bool_env(env, "AUTO_CREATE_TABLES", True)
    expose_errors = _bool_env(env, "EXPOSE_ERROR_DETAILS", False)
    policy = env.get("STOCK_OUT_INSUFFICIENT_POLICY", "warn").strip().lower()
    conflict_status = env.get("CONFLICT_HTTP_STATUS", "400").strip()

    checks: list[tuple[str, bool, str]] = [
        (
            "STOCK_OUT_INSUFFICIENT_POLICY is warn or reject",
            policy in {"warn", "reject"},
            f"STOCK_OUT_INSUFFICIENT_POLICY={policy}",
        ),
        (
            "CONFLICT_HTTP_STATUS is 400 or 409",
            conflict_status in {"400", "409"},
            f"CONFLICT_HTTP_STATUS={conflict_status}",
        ),
    ]

    if environment in {"production", "prod"}:
        checks.extend(
            [
                (
                    "DATABASE_URL is not SQLite",
                    "sqlite" not in database_url.lower(),
                    f"DATABASE_URL={database_url.split('@')[-1]}",
                ),
                (
                    "AUTO_CREATE_TABLES is disabled",
                    not auto_create_tables,
                    f"AUTO_CREATE_TABLES={auto_create_tables}",
                ),
                (
                    "EXPOSE_ERROR_DETAILS is disabled",
                    not expose_errors,
                    f"EXPOSE_ERROR_DETAILS={expose_errors}",
                ),
            ]
        )
    return checks


def run() -> int:
    environment = os.getenv("ENVIRONMENT", "development").strip().lower()
    failures = 0
    print("StockLedger Preflight")
    print(f"- environment: {environment}")
    for title, ok, detail in collect_checks():
        print(f"[{'PASS' if ok else 'FAIL'}] {title} ({detail})")
        failures += 0 if ok else 1

    if failures:
        print(f"\nPreflight failed with {failures} problem(s).")
        return 1

    print("\nPreflight passed.")
    return 0


if __name__ == "__main__":
    sys.exit(run())
