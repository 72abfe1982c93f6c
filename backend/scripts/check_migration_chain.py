"""Static checks over the Alembic revision files.

Usage:
    python scripts/check_migration_chain.py

Fails when revision ids repeat, a down_revision points nowhere, the chain
has more than one head, a file name does not start with its revision id,
or a revision lacks a downgrade.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

REVISION_RE = re.compile(r'^revision\s*=\s*["\']([^"\']+)["\']', re.MULTILINE)
DOWN_RE = re.compile(r'^down_revision\s*=\s*(?:["\']([^"\']+)["\']|None)', re.MULTILINE)
DOWNGRADE_RE = re.compile(r"^def downgrade\(\)", re.MULTILINE)

VERSIONS_DIR = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def inspect(versions_dir: Path = VERSIONS_DIR) -> tuple[list[str], list[str]]:
    """Return (heads, errors) for the revision files in `versions_dir`."""
    parents: dict[str, str | None] = {}
    errors: list[str] = []

    for path in sorted(versions_dir.glob("*.py")):
        source = path.read_text(encoding="utf-8")
        rev_match = REVISION_RE.search(source)
        if rev_match is None:
            errors.append(f"{path.name}: no revision id")
            continue
        revision = rev_match.group(1)
        if revision in parents:
            errors.append(f"{path.name}: revision {revision} is declared twice")
        if not path.name.startswith(revision):
            errors.append(f"{path.name}: file name does not start with revision {revision}")
        if DOWNGRADE_RE.search(source) is None:
            errors.append(f"{path.name}: missing downgrade()")
        down_match = DOWN_RE.search(source)
        parents[revision] = down_match.group(1) if down_match else None

    for revision, parent in parents.items():
        if parent is not None and parent not in parents:
            errors.append(f"revision {revision} revises unknown {parent}")

    referenced = {p for p in parents.values() if p is not None}
    heads = sorted(r for r in parents if r not in referenced)
    if len(heads) != 1:
        errors.append(f"expected one head, found {len(heads)}: {heads}")
    return heads, errors


def main() -> int:
    heads, errors = inspect()
    print("Migration chain check")
    for err in errors:
        print(f"[FAIL] {err}")
    if errors:
        return 1
    print(f"[PASS] single head {heads[0]}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
