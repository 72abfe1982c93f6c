from pathlib import Path

from scripts.check_migration_chain import VERSIONS_DIR, inspect
from scripts.db_preflight import collect_checks


def _revision(directory: Path, revision: str, down: str = None, downgrade: bool = True) -> None:
    parent = f'"{down}"' if down else "None"
    body = f'revision = "{revision}"\ndown_revision = {parent}\n\n\ndef upgrade():\n    pass\n'
    if downgrade:
        body += "\n\ndef downgrade():\n    pass\n"
    (directory / f"{revision}_change.py").write_text(body, encoding="utf-8")


def _failed(checks):
    return [title for title, ok, _ in checks if not ok]


def test_shipped_migrations_form_a_single_chain():
    heads, errors = inspect(VERSIONS_DIR)
    assert errors == []
    assert len(heads) == 1


def test_linear_chain_passes(tmp_path):
    _revision(tmp_path, "0001")
    _revision(tmp_path, "0002", down="0001")
    assert inspect(tmp_path) == (["0002"], [])


def test_branching_chain_reports_two_heads(tmp_path):
    _revision(tmp_path, "0001")
    _revision(tmp_path, "0002", down="0001")
    _revision(tmp_path, "0003", down="0001")
    heads, errors = inspect(tmp_path)
    assert heads == ["0002", "0003"]
    assert any("expected one head" in e for e in errors)


def test_missing_parent_and_downgrade_are_reported(tmp_path):
    _revision(tmp_path, "0002", down="0001", downgrade=False)
    _, errors = inspect(tmp_path)
    assert any("unknown 0001" in e for e in errors)
    assert any("missing downgrade" in e for e in errors)


def test_preflight_defaults_pass_outside_production():
    assert _failed(collect_checks({})) == []


def test_preflight_rejects_unknown_policy_and_status():
    failed = _failed(
        collect_checks({"STOCK_OUT_INSUFFICIENT_POLICY": "ignore", "CONFLICT_HTTP_STATUS": "418"})
    )
    assert len(failed) == 2


def test_preflight_production_requires_real_database():
    env = {
        "ENVIRONMENT": "production",
        "DATABASE_URL": "sqlite:///./stockledger.db",
        "AUTO_CREATE_TABLES": "true",
    }
    failed = _failed(collect_checks(env))
    assert "DATABASE_URL is not SQLite" in failed
    assert "AUTO_CREATE_TABLES is disabled" in failed


def test_preflight_production_passes_with_postgres():
    env = {
        "ENVIRONMENT": "production",
        "DATABASE_URL": "postgresql://ledger:secret@db:5432/ledger",
        "AUTO_CREATE_TABLES": "false",
    }
    assert _failed(collect_checks(env)) == []
