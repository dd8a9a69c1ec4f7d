#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Schema migrations for databases created by earlier releases."""

from __future__ import annotations

import sqlite3


def run_migrations(conn: sqlite3.Connection) -> None:
    """Add columns introduced after the initial schema."""
    def _ensure_column(table: str, column: str, ddl: str) -> None:
        columns = [row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()]
        if columns and column not in columns:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl}")

    columns = [row[1] for row in conn.execute("PRAGMA table_info(journal_entries)").fetchall()]
    if not columns:
        return
    _ensure_column("journal_entries", "reversed_by", "reversed_by INTEGER")
    _ensure_column("journal_entries", "reversed_at", "reversed_at TEXT")
    _ensure_column("journal_entries", "reversal_reason", "reversal_reason TEXT")
    _ensure_column("journal_entries", "reversal_entry_id", "reversal_entry_id INTEGER")
    _ensure_column("accounting_vouchers", "validated_at", "validated_at TEXT")
    _ensure_column("accounting_vouchers", "third_party_id", "third_party_id INTEGER")
    _ensure_column("bank_transactions", "void_reason", "void_reason TEXT")
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS sequences (
          scope TEXT PRIMARY KEY,
          last_value INTEGER NOT NULL DEFAULT 0,
          updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS voucher_status_history (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          voucher_id INTEGER NOT NULL,
          previous_status TEXT,
          new_status TEXT NOT NULL,
          actor_id INTEGER,
          comments TEXT,
          created_at TEXT DEFAULT CURRENT_TIMESTAMP,
          FOREIGN KEY (voucher_id) REFERENCES accounting_vouchers(id) ON DELETE CASCADE
        );
        """
    )
