import json

import pytest

from toolhub.config.permissions_config import Role
from toolhub.scripts import seed_users

SCRIPT_ENV = ["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "SEED_USERS_FILE", "SEED_DEFAULT_PASSWORD"]


def test_mixed_input_tally(fake_db):
    fake_db.add_user("Already Here", Role.OWNER)
    entries = [
        {"email": "new.one@example.com", "name": "New One", "role": "Owner"},
        {"email": "already.here@example.com", "name": "Already Here", "role": "Owner"},
        {"email": "not-an-email", "name": "Broken", "role": "Owner"},
        {"email": "bad.role@example.com", "name": "Bad Role", "role": "Superuser"},
        "just a string",
        {"email": "new.two@example.com", "name": "New Two", "role": "Observer"},
    ]

    report = seed_users.seed_users(fake_db, entries, "temporary-pass")

    assert report == {"success": 2, "skipped": 1, "errors": 3, "total": 6}
    assert report["success"] + report["skipped"] + report["errors"] == report["total"]
    created = {row["email"]: row for row in fake_db.rows("users")}
    assert created["new.two@example.com"]["role"] == "Observer"
    assert created["new.one@example.com"]["must_change_password"] is True


def test_unexpected_create_error_counts_as_error(fake_db):
    fake_db.failures[("users", "insert")] = RuntimeError("insert rejected")
    report = seed_users.seed_users(
        fake_db, [{"email": "x@example.com", "name": "X", "role": "Admin"}], "pw"
    )
    assert report == {"success": 0, "skipped": 0, "errors": 1, "total": 1}


def test_missing_configuration_exits_non_zero(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in SCRIPT_ENV:
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(SystemExit) as exc:
        seed_users.main()
    assert exc.value.code == 1


def test_main_completes_with_configuration(monkeypatch, tmp_path, fake_db):
    seed_file = tmp_path / "users.json"
    seed_file.write_text(json.dumps([{"email": "a@example.com", "name": "A", "role": "Owner"}]))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SUPABASE_URL", "http://localhost:54321")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")
    monkeypatch.setenv("SEED_USERS_FILE", str(seed_file))
    monkeypatch.setenv("SEED_DEFAULT_PASSWORD", "temporary-pass")
    monkeypatch.setattr(seed_users, "service_client", lambda script_settings: fake_db)

    report = seed_users.main()

    assert report == {"success": 1, "skipped": 0, "errors": 0, "total": 1}
