"""Tests for the vaultkeeper command line interface."""

import pytest

from vaultkeeper.__main__ import build_parser, main
from vaultkeeper.core.kv_store import SQLiteKeyValueStore
from vaultkeeper.vault.vault_store import VaultStore

MASTER_PASSWORD = "Tr0ub4dor&3"


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "cli_vault.db")


@pytest.fixture
def prompts(monkeypatch):
    """Queue answers for getpass prompts."""
    answers = []

    def fake_getpass(prompt=""):
        return answers.pop(0)

    monkeypatch.setattr("getpass.getpass", fake_getpass)
    return answers


@pytest.fixture
def vault(db, prompts):
    prompts.extend([MASTER_PASSWORD, MASTER_PASSWORD])
    assert main(["--db", db, "init"]) == 0
    return VaultStore(SQLiteKeyValueStore(db))


def _entries(db):
    return VaultStore(SQLiteKeyValueStore(db)).list_entries(MASTER_PASSWORD)


# ── Vault lifecycle ─────────────────────────────────────────────────


class TestInit:

    def test_init_creates_vault(self, capsys, vault):
        assert vault.is_initialized()
        assert vault.authenticate(MASTER_PASSWORD)
        assert "[OK] Vault created" in capsys.readouterr().out

    def test_init_twice(self, vault, db, capsys):
        assert main(["--db", db, "init"]) == 1
        assert "[ERROR] Vault already exists." in capsys.readouterr().err

    def test_init_mismatched_confirmation(self, db, prompts, capsys):
        prompts.extend(["one", "two"])
        assert main(["--db", db, "init"]) == 1
        assert "Passwords do not match" in capsys.readouterr().err

    def test_init_weak_password_warns(self, db, prompts, capsys):
        prompts.extend(["abc", "abc"])
        assert main(["--db", db, "init"]) == 0
        assert "[WARN] Weak master password" in capsys.readouterr().out

    def test_commands_require_vault(self, db, prompts, capsys):
        assert main(["--db", db, "list"]) == 1
        assert "Vault does not exist" in capsys.readouterr().err

    def test_reset_with_confirmation(self, vault, db, monkeypatch, capsys):
        monkeypatch.setattr("builtins.input", lambda prompt="": "reset")
        assert main(["--db", db, "reset"]) == 0
        assert not vault.is_initialized()

    def test_reset_aborted(self, vault, db, monkeypatch, capsys):
        monkeypatch.setattr("builtins.input", lambda prompt="": "no")
        assert main(["--db", db, "reset"]) == 1
        assert vault.is_initialized()
        assert "Aborted" in capsys.readouterr().out

    def test_reset_yes(self, vault, db):
        assert main(["--db", db, "reset", "--yes"]) == 0
        assert not vault.is_initialized()


# ── Entries ─────────────────────────────────────────────────────────


class TestEntries:

    def test_add_and_list(self, vault, db, prompts, capsys):
        prompts.extend([MASTER_PASSWORD, "s3cret"])
        assert main([
            "--db", db, "add", "--service", "Mail", "--username", "a@b.com",
            "--category", "Personal",
        ]) == 0
        out = capsys.readouterr().out
        entry = _entries(db)[0]
        assert f"[OK] Entry added: {entry.id}" in out
        assert entry.secret == "s3cret"
        assert entry.category == "Personal"

        prompts.append(MASTER_PASSWORD)
        assert main(["--db", db, "list"]) == 0
        out = capsys.readouterr().out
        assert "Mail" in out
        assert "[Personal]" in out
        assert "s3cret" not in out
        assert "1 entry" in out

    def test_add_wrong_password(self, vault, db, prompts, capsys):
        prompts.append("wrong")
        assert main(["--db", db, "add", "--service", "Mail", "--username", "u"]) == 1
        assert "Incorrect master password" in capsys.readouterr().err
        assert _entries(db) == []

    def test_add_generated_secret(self, vault, db, prompts, capsys):
        prompts.append(MASTER_PASSWORD)
        assert main([
            "--db", db, "add", "--service", "Bank", "--username", "u",
            "--generate", "--length", "24", "--no-symbols",
        ]) == 0
        secret = _entries(db)[0].secret
        assert len(secret) == 24
        assert secret.isalnum()
        assert f"generated secret: {secret}" in capsys.readouterr().out

    def test_list_empty(self, vault, db, prompts, capsys):
        prompts.append(MASTER_PASSWORD)
        assert main(["--db", db, "list"]) == 0
        assert "No entries" in capsys.readouterr().out

    def test_list_wrong_password(self, vault, db, prompts, capsys):
        prompts.append("wrong")
        assert main(["--db", db, "list"]) == 1
        assert "[ERROR] Incorrect master password" in capsys.readouterr().err

    def test_show(self, vault, db, prompts, capsys):
        entry = vault.create_entry(
            MASTER_PASSWORD, service_name="Mail", username="u", secret="s3cret"
        )
        prompts.append(MASTER_PASSWORD)
        assert main(["--db", db, "show", entry.id]) == 0
        assert "s3cret" in capsys.readouterr().out

    def test_show_missing(self, vault, db, prompts, capsys):
        prompts.append(MASTER_PASSWORD)
        assert main(["--db", db, "show", "nope"]) == 1
        assert "No entry with id nope" in capsys.readouterr().err

    def test_edit(self, vault, db, prompts):
        entry = vault.create_entry(
            MASTER_PASSWORD, service_name="Mail", username="u", secret="s",
            notes="old notes",
        )
        prompts.extend([MASTER_PASSWORD, "new-secret"])
        assert main([
            "--db", db, "edit", entry.id, "--username", "v", "--notes", "",
            "--new-secret",
        ]) == 0
        updated = _entries(db)[0]
        assert updated.username == "v"
        assert updated.notes is None
        assert updated.secret == "new-secret"
        assert updated.service_name == "Mail"

    def test_edit_nothing(self, vault, db, prompts, capsys):
        prompts.append(MASTER_PASSWORD)
        assert main(["--db", db, "edit", "some-id"]) == 0
        assert "Nothing to change" in capsys.readouterr().out

    def test_delete(self, vault, db, prompts, capsys):
        entry = vault.create_entry(
            MASTER_PASSWORD, service_name="Mail", username="u", secret="s"
        )
        prompts.append(MASTER_PASSWORD)
        assert main(["--db", db, "delete", entry.id]) == 0
        assert _entries(db) == []

        prompts.append(MASTER_PASSWORD)
        assert main(["--db", db, "delete", entry.id]) == 1


# ── Generator ───────────────────────────────────────────────────────


class TestGeneratorCommands:

    def test_generate_count(self, capsys):
        assert main(["generate", "--count", "3", "--length", "10"]) == 0
        lines = capsys.readouterr().out.split()
        assert len(lines) == 3
        assert all(len(line) == 10 for line in lines)

    def test_generate_no_classes(self, capsys):
        argv = ["generate", "--no-lowercase", "--no-uppercase", "--no-digits", "--no-symbols"]
        assert main(argv) == 1
        assert "[ERROR]" in capsys.readouterr().err

    def test_strength(self, prompts, capsys):
        prompts.append("Sunflower9")
        assert main(["strength"]) == 0
        out = capsys.readouterr().out
        assert "Score: 40/100 (fair)" in out
        assert "- Add symbols" in out


class TestParser:

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_db_defaults_to_settings(self, prompts, tmp_path):
        # conftest points VAULTKEEPER_DB_PATH at tmp_path / "vault.db"
        prompts.extend([MASTER_PASSWORD, MASTER_PASSWORD])
        assert main(["init"]) == 0
        assert (tmp_path / "vault.db").exists()
