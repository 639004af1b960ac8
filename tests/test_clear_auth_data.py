from __future__ import annotations

import contextlib
import io
from typing import List

from sqlalchemy.exc import OperationalError

import clear_auth_data
from auth import create_session
from models import Account, User, UserSession


class _RecordingQuery:
    def __init__(self, db: "_RecordingSession", model) -> None:
        self._db = db
        self._model = model

    def delete(self) -> int:
        self._db.calls.append(("delete", self._model))
        if self._model in self._db.failing:
            raise OperationalError("DELETE", {}, Exception("database is locked"))
        return 0


class _RecordingSession:
    def __init__(self, failing=()) -> None:
        self.calls: List[tuple] = []
        self.failing = set(failing)

    def query(self, model):
        return _RecordingQuery(self, model)

    def commit(self) -> None:
        self.calls.append(("commit", None))

    def close(self) -> None:
        self.calls.append(("close", None))


def _deleted_models(db: _RecordingSession) -> list:
    return [model for action, model in db.calls if action == "delete"]


def test_main_empties_all_auth_tables(session_factory, make_user, db, capsys) -> None:
    admin = make_user("admin@test.com", "ADMIN")
    direction = make_user("direction@test.com", "DIRECTION")
    create_session(db, admin)
    create_session(db, direction)
    create_session(db, direction)
    db.close()

    assert clear_auth_data.main(session_factory) == 0

    check = session_factory()
    try:
        assert check.query(UserSession).count() == 0
        assert check.query(Account).count() == 0
        assert check.query(User).count() == 0
    finally:
        check.close()

    out = capsys.readouterr().out
    assert "Deleted all sessions (3 rows)." in out
    assert "Deleted all accounts (2 rows)." in out
    assert "Deleted all users (2 rows)." in out
    assert "python seed_users.py" in out


def test_step_report_follows_the_current_stdout() -> None:
    db = _RecordingSession()
    buffer = io.StringIO()

    with contextlib.redirect_stdout(buffer):
        assert clear_auth_data.main(lambda: db) == 0

    report = buffer.getvalue()
    assert report.index("Clearing all authentication data") < report.index("Deleted all sessions")
    assert report.index("Deleted all users") < report.index("Database cleaned successfully")


def test_step_report_can_go_to_an_explicit_stream() -> None:
    db = _RecordingSession()
    out = io.StringIO()

    clear_auth_data.clear_auth_data(db, out=out)

    assert out.getvalue().splitlines() == [
        "Deleted all sessions (0 rows).",
        "Deleted all accounts (0 rows).",
        "Deleted all users (0 rows).",
    ]


def test_main_succeeds_on_empty_database(session_factory) -> None:
    assert clear_auth_data.main(session_factory) == 0


def test_deletes_sessions_then_accounts_then_users() -> None:
    db = _RecordingSession()

    assert clear_auth_data.main(lambda: db) == 0

    assert _deleted_models(db) == [UserSession, Account, User]
    assert db.calls[-1] == ("close", None)


def test_each_step_is_committed_before_the_next() -> None:
    db = _RecordingSession()

    assert clear_auth_data.main(lambda: db) == 0

    actions = [action for action, _ in db.calls]
    assert actions == ["delete", "commit", "delete", "commit", "delete", "commit", "close"]


def test_account_failure_exits_nonzero_and_leaves_users(capsys) -> None:
    db = _RecordingSession(failing={Account})

    assert clear_auth_data.main(lambda: db) == 1

    assert _deleted_models(db) == [UserSession, Account]
    assert db.calls.count(("close", None)) == 1
    captured = capsys.readouterr()
    assert "failed to clear authentication data" in captured.err
    assert "Database cleaned successfully" not in captured.out


def test_account_failure_against_real_database_keeps_users(session_factory, make_user, db, monkeypatch) -> None:
    make_user("admin@test.com", "ADMIN")
    db.close()

    steps = clear_auth_data.CLEAR_ORDER

    class _BrokenAccount:
        pass

    # An unmapped class makes the ORM raise when the accounts step runs.
    monkeypatch.setattr(
        clear_auth_data,
        "CLEAR_ORDER",
        (steps[0], (_BrokenAccount, "accounts"), steps[2]),
    )

    assert clear_auth_data.main(session_factory) == 1

    check = session_factory()
    try:
        assert check.query(User).count() == 1
        assert check.query(Account).count() == 1
    finally:
        check.close()
