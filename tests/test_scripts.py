import cv_backend.scripts.ensure_tables as ensure_tables
import cv_backend.scripts.purge_superseded as purge
from cv_backend.errors import StorageError


class _Session:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_ensure_tables_main(monkeypatch, capsys):
    called = {"ok": False}
    monkeypatch.setattr(ensure_tables, "ensure_tables_exist", lambda: called.update(ok=True))
    ensure_tables.main()
    assert called["ok"] is True
    assert "table check complete" in capsys.readouterr().out


def test_purge_with_yes_flag(monkeypatch, capsys):
    session = _Session()
    seen = {}
    monkeypatch.setattr(purge, "ensure_tables_exist", lambda: None)
    monkeypatch.setattr(purge, "SessionLocal", lambda: session)
    monkeypatch.setattr(purge, "purge_superseded", lambda db, keep: seen.update(keep=keep) or 4)
    assert purge.main(["--yes", "--keep", "2"]) == 0
    assert seen["keep"] == 2
    assert session.closed is True
    assert "removed: 4" in capsys.readouterr().out


def test_purge_aborts_without_confirmation(monkeypatch):
    monkeypatch.setattr("builtins.input", lambda _prompt: "no")
    monkeypatch.setattr(purge, "ensure_tables_exist", lambda: (_ for _ in ()).throw(AssertionError("must not run")))
    assert purge.main([]) == 1


def test_purge_rejects_negative_keep():
    assert purge.main(["--yes", "--keep", "-1"]) == 1


def test_purge_reports_storage_error(monkeypatch):
    session = _Session()
    monkeypatch.setattr(purge, "ensure_tables_exist", lambda: None)
    monkeypatch.setattr(purge, "SessionLocal", lambda: session)
    monkeypatch.setattr(purge, "purge_superseded", lambda db, keep: (_ for _ in ()).throw(StorageError("db")))
    assert purge.main(["--yes"]) == 1
    assert session.closed is True
