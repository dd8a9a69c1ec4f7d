import logging

import pytest

from general_ledger.database import atomic, get_db, init_db
from general_ledger.utils import PersistenceError


def test_connection_commit(tmp_path):
    db_path = tmp_path / "ledger.db"
    with get_db(str(db_path)) as conn:
        init_db(conn)
        conn.execute(
            "INSERT INTO fiscal_periods (name, start_date, end_date) VALUES ('2026-01', '2026-01-01', '2026-01-31')"
        )

    with get_db(str(db_path)) as conn:
        row = conn.execute("SELECT name FROM fiscal_periods").fetchone()
        assert row["name"] == "2026-01"


def test_connection_rollback(tmp_path):
    db_path = tmp_path / "ledger.db"
    with get_db(str(db_path)) as conn:
        init_db(conn)

    with pytest.raises(RuntimeError):
        with get_db(str(db_path)) as conn:
            conn.execute(
                "INSERT INTO fiscal_periods (name, start_date, end_date) VALUES ('2026-02', '2026-02-01', '2026-02-28')"
            )
            raise RuntimeError("force rollback")

    with get_db(str(db_path)) as conn:
        rows = conn.execute("SELECT * FROM fiscal_periods").fetchall()
        assert rows == []


def test_atomic_rolls_back_only_its_own_writes(conn):
    with atomic(conn):
        conn.execute("INSERT INTO third_parties (code, name) VALUES ('T1', 'kept')")

    with pytest.raises(RuntimeError):
        with atomic(conn):
            conn.execute("INSERT INTO third_parties (code, name) VALUES ('T2', 'dropped')")
            raise RuntimeError("boom")

    codes = [row["code"] for row in conn.execute("SELECT code FROM third_parties")]
    assert codes == ["T1"]


def test_nested_atomic_failure_keeps_outer_scope(conn):
    with atomic(conn):
        conn.execute("INSERT INTO third_parties (code, name) VALUES ('OUT', 'outer')")
        with pytest.raises(RuntimeError):
            with atomic(conn):
                conn.execute("INSERT INTO third_parties (code, name) VALUES ('IN', 'inner')")
                raise RuntimeError("inner fails")

    codes = [row["code"] for row in conn.execute("SELECT code FROM third_parties")]
    assert codes == ["OUT"]


def test_sqlite_errors_become_persistence_errors(conn):
    with pytest.raises(PersistenceError) as exc:
        with atomic(conn):
            conn.execute(
                "INSERT INTO journal_entry_lines (journal_entry_id, account_id, debit_amount, order_number) "
                "VALUES (999, 999, 10, 1)"
            )
    assert exc.value.code == "PERSISTENCE_ERROR"
    assert exc.value.details["sqlite_error"] == "IntegrityError"


def test_commit_hook_runs_after_commit(conn):
    calls = []
    with atomic(conn):
        conn.on_commit(lambda c: calls.append("ran"), name="probe")
    assert calls == []

    conn.commit()
    assert calls == ["ran"]


def test_commit_hook_dropped_with_rolled_back_scope(conn):
    calls = []
    with pytest.raises(RuntimeError):
        with atomic(conn):
            conn.on_commit(lambda c: calls.append("ran"), name="probe")
            raise RuntimeError("abort")

    conn.commit()
    assert calls == []


def test_commit_hook_dropped_on_rollback(conn):
    calls = []
    with atomic(conn):
        conn.on_commit(lambda c: calls.append("ran"), name="probe")
    conn.rollback()
    conn.commit()
    assert calls == []


def test_failing_hook_is_logged_and_retried(conn, caplog):
    attempts = []

    def flaky(c):
        attempts.append(1)
        raise RuntimeError("downstream unavailable")

    with atomic(conn):
        conn.execute("INSERT INTO third_parties (code, name) VALUES ('H', 'hooked')")
        conn.on_commit(flaky, name="flaky", attempts=3)

    with caplog.at_level(logging.WARNING):
        conn.commit()

    assert len(attempts) == 3
    assert any("flaky" in record.getMessage() for record in caplog.records)
    assert any(record.levelno == logging.ERROR for record in caplog.records)
    row = conn.execute("SELECT name FROM third_parties WHERE code = 'H'").fetchone()
    assert row["name"] == "hooked"


def test_failing_hook_writes_are_rolled_back(conn):
    def half_done(c):
        c.execute("INSERT INTO third_parties (code, name) VALUES ('HALF', 'partial')")
        raise RuntimeError("fails after writing")

    conn.on_commit(half_done, name="half")
    conn.commit()

    row = conn.execute("SELECT 1 FROM third_parties WHERE code = 'HALF'").fetchone()
    assert row is None
