#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Per-scope document number sequences.

Numbers come from the ``sequences`` table, incremented in place inside
the caller's write transaction. Every increment is floored at the highest
number already present for the prefix, so numbers supplied by hand are
never handed out again.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from general_ledger.database import atomic


def _max_suffix(conn, table: str, column: str, prefix: str, separator: str = "-") -> int:
    rows = conn.execute(
        f"SELECT {column} AS value FROM {table} WHERE {column} LIKE ?",
        (f"{prefix}%",),
    ).fetchall()
    highest = 0
    for row in rows:
        suffix = row["value"][len(prefix):]
        if separator and suffix.startswith(separator):
            suffix = suffix[len(separator):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


def next_sequence(conn, scope: str, floor: int = 0) -> int:
    """Increment ``scope`` past ``max(last_value, floor)`` and return the new value."""
    with atomic(conn):
        conn.execute(
            "INSERT OR IGNORE INTO sequences (scope, last_value) VALUES (?, 0)",
            (scope,),
        )
        conn.execute(
            """
            UPDATE sequences
            SET last_value = MAX(last_value, ?) + 1, updated_at = CURRENT_TIMESTAMP
            WHERE scope = ?
            """,
            (floor, scope),
        )
        row = conn.execute(
            "SELECT last_value FROM sequences WHERE scope = ?", (scope,)
        ).fetchone()
    return int(row["last_value"])


def generate_entry_number(conn, entry_type: str = "JE", year: Optional[int] = None) -> str:
    """``{TYPE}-{YYYY}-{NNNNN}``"""
    year = year or datetime.now().year
    prefix = f"{entry_type}-{year}"
    with atomic(conn):
        floor = _max_suffix(conn, "journal_entries", "entry_number", prefix)
        seq = next_sequence(conn, f"entry:{entry_type}:{year}", floor)
    return f"{prefix}-{seq:05d}"


def generate_voucher_number(
    conn, when: Optional[date] = None, prefix: str = "CV"
) -> str:
    """``CV{YYYY}{MM}-{NNNN}``"""
    when = when or datetime.now()
    number_prefix = f"{prefix}{when.year:04d}{when.month:02d}"
    with atomic(conn):
        floor = _max_suffix(conn, "accounting_vouchers", "voucher_number", number_prefix)
        seq = next_sequence(conn, f"voucher:{number_prefix}", floor)
    return f"{number_prefix}-{seq:04d}"
