#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""SQLite connection helper and unit-of-work scopes."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List

from general_ledger.database.migrations import run_migrations
from general_ledger.utils import PersistenceError

logger = logging.getLogger(__name__)


@dataclass
class CommitHook:
    name: str
    func: Callable[["LedgerConnection"], None]
    attempts: int = 1


class LedgerConnection(sqlite3.Connection):
    """Connection that runs queued hooks after a successful commit.

    Hooks queued inside a scope that is later rolled back are dropped.
    Each hook runs in its own transaction; a failing hook is rolled back
    and logged, never raised to the committer.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._commit_hooks: List[CommitHook] = []
        self._savepoint_seq = 0

    def on_commit(
        self,
        func: Callable[["LedgerConnection"], None],
        name: str = "hook",
        attempts: int = 1,
    ) -> None:
        self._commit_hooks.append(CommitHook(name=name, func=func, attempts=max(1, attempts)))

    def commit(self) -> None:
        super().commit()
        hooks, self._commit_hooks = self._commit_hooks, []
        for hook in hooks:
            self._run_hook(hook)

    def rollback(self) -> None:
        super().rollback()
        self._commit_hooks = []

    def _run_hook(self, hook: CommitHook) -> None:
        for attempt in range(1, hook.attempts + 1):
            try:
                hook.func(self)
                super().commit()
                return
            except Exception as exc:
                super().rollback()
                if attempt < hook.attempts:
                    logger.warning(
                        "post-commit hook %s failed (attempt %d/%d): %s",
                        hook.name,
                        attempt,
                        hook.attempts,
                        exc,
                    )
                else:
                    logger.error(
                        "post-commit hook %s gave up after %d attempt(s): %s",
                        hook.name,
                        hook.attempts,
                        exc,
                    )


@contextmanager
def get_db(db_path: str = "./ledger.db") -> Iterator[LedgerConnection]:
    conn = sqlite3.connect(db_path, factory=LedgerConnection)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        run_migrations(conn)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def atomic(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run a block as one all-or-nothing unit inside the current transaction.

    Opens an immediate (write-locked) transaction when none is active and
    nests a savepoint. On any exception the savepoint is rolled back, so
    none of the block's writes survive; ``sqlite3`` errors are re-raised
    as ``PersistenceError``.
    """
    if not conn.in_transaction:
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not start transaction: {exc}") from exc
    seq = getattr(conn, "_savepoint_seq", 0) + 1
    if isinstance(conn, LedgerConnection):
        conn._savepoint_seq = seq
    savepoint = f"gl_sp_{seq}"
    hooks = getattr(conn, "_commit_hooks", None)
    hook_mark = len(hooks) if hooks is not None else 0
    conn.execute(f"SAVEPOINT {savepoint}")
    try:
        yield conn
    except Exception as exc:
        conn.execute(f"ROLLBACK TO SAVEPOINT {savepoint}")
        conn.execute(f"RELEASE SAVEPOINT {savepoint}")
        if hooks is not None:
            del hooks[hook_mark:]
        if isinstance(exc, sqlite3.Error):
            logger.error("database error, operation rolled back: %s", exc)
            raise PersistenceError(
                f"Database operation failed: {exc}",
                {"sqlite_error": type(exc).__name__},
            ) from exc
        raise
    else:
        conn.execute(f"RELEASE SAVEPOINT {savepoint}")
