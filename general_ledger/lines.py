#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Ledger line validation and single-line maintenance on draft entries."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Tuple

from general_ledger.database import atomic
from general_ledger.models import LedgerLine
from general_ledger.models.entry import ENTRY_DRAFT
from general_ledger.utils import InvalidLineError, InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)


def validate_line(line: Any) -> LedgerLine:
    """Return ``line`` as a validated ``LedgerLine``."""
    if isinstance(line, LedgerLine):
        parsed = line
    elif isinstance(line, dict):
        parsed = LedgerLine.from_dict(line)
    else:
        raise InvalidLineError("Line must be an object", {"line": repr(line)})
    parsed.validate()
    return parsed


def _require_draft_entry(conn, entry_id: int) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT id, status, third_party_id FROM journal_entries WHERE id = ?", (entry_id,)
    ).fetchone()
    if not row:
        raise NotFoundError(f"Journal entry not found: {entry_id}", code="ENTRY_NOT_FOUND")
    if row["status"] != ENTRY_DRAFT:
        raise InvalidStateError(
            f"Lines can only change while the entry is draft (status: {row['status']})",
            {"journal_entry_id": entry_id, "status": row["status"]},
        )
    return dict(row)


def _require_line(conn, line_id: int) -> Dict[str, Any]:
    row = conn.execute("SELECT * FROM journal_entry_lines WHERE id = ?", (line_id,)).fetchone()
    if not row:
        raise NotFoundError(f"Journal entry line not found: {line_id}", code="LINE_NOT_FOUND")
    return dict(row)


def insert_lines(conn, entry_id: int, lines: Iterable[LedgerLine]) -> List[LedgerLine]:
    """Insert already-validated lines numbered 1..N in the given order."""
    inserted = []
    for index, line in enumerate(lines, start=1):
        line.order_number = index
        cur = conn.execute(
            """
            INSERT INTO journal_entry_lines (
              journal_entry_id, account_id, third_party_id, description,
              debit_amount, credit_amount, order_number
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry_id,
                line.account_id,
                line.third_party_id,
                line.description,
                line.debit_amount,
                line.credit_amount,
                index,
            ),
        )
        line.id = cur.lastrowid
        inserted.append(line)
    return inserted


def recompute_totals(conn, entry_id: int) -> Tuple[float, float]:
    row = conn.execute(
        """
        SELECT COALESCE(SUM(debit_amount), 0) AS debit_total,
               COALESCE(SUM(credit_amount), 0) AS credit_total
        FROM journal_entry_lines
        WHERE journal_entry_id = ?
        """,
        (entry_id,),
    ).fetchone()
    total_debit = round(row["debit_total"], 2)
    total_credit = round(row["credit_total"], 2)
    conn.execute(
        "UPDATE journal_entries SET total_debit = ?, total_credit = ? WHERE id = ?",
        (total_debit, total_credit, entry_id),
    )
    return total_debit, total_credit


def reorder_lines(conn, entry_id: int) -> int:
    """Renumber an entry's lines to a dense 1..N keeping their current order."""
    rows = conn.execute(
        """
        SELECT id FROM journal_entry_lines
        WHERE journal_entry_id = ?
        ORDER BY order_number, id
        """,
        (entry_id,),
    ).fetchall()
    with atomic(conn):
        for index, row in enumerate(rows, start=1):
            conn.execute(
                "UPDATE journal_entry_lines SET order_number = ? WHERE id = ?",
                (index, row["id"]),
            )
    return len(rows)


def create_line(conn, entry_id: int, line: Any) -> Dict[str, Any]:
    parsed = validate_line(line)
    with atomic(conn):
        entry = _require_draft_entry(conn, entry_id)
        if parsed.order_number is None:
            row = conn.execute(
                "SELECT COALESCE(MAX(order_number), 0) AS max_no FROM journal_entry_lines "
                "WHERE journal_entry_id = ?",
                (entry_id,),
            ).fetchone()
            parsed.order_number = row["max_no"] + 1
        cur = conn.execute(
            """
            INSERT INTO journal_entry_lines (
              journal_entry_id, account_id, third_party_id, description,
              debit_amount, credit_amount, order_number
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry_id,
                parsed.account_id,
                parsed.third_party_id or entry["third_party_id"],
                parsed.description,
                parsed.debit_amount,
                parsed.credit_amount,
                parsed.order_number,
            ),
        )
        total_debit, total_credit = recompute_totals(conn, entry_id)
    return {
        "line_id": cur.lastrowid,
        "journal_entry_id": entry_id,
        "order_number": parsed.order_number,
        "total_debit": total_debit,
        "total_credit": total_credit,
    }


def update_line(conn, line_id: int, line: Any) -> Dict[str, Any]:
    parsed = validate_line(line)
    with atomic(conn):
        current = _require_line(conn, line_id)
        entry_id = current["journal_entry_id"]
        _require_draft_entry(conn, entry_id)
        conn.execute(
            """
            UPDATE journal_entry_lines
            SET account_id = ?, third_party_id = ?, description = ?,
                debit_amount = ?, credit_amount = ?, order_number = ?
            WHERE id = ?
            """,
            (
                parsed.account_id,
                parsed.third_party_id,
                parsed.description,
                parsed.debit_amount,
                parsed.credit_amount,
                parsed.order_number or current["order_number"],
                line_id,
            ),
        )
        total_debit, total_credit = recompute_totals(conn, entry_id)
    return {
        "line_id": line_id,
        "journal_entry_id": entry_id,
        "total_debit": total_debit,
        "total_credit": total_credit,
    }


def delete_line(conn, line_id: int) -> Dict[str, Any]:
    with atomic(conn):
        current = _require_line(conn, line_id)
        entry_id = current["journal_entry_id"]
        _require_draft_entry(conn, entry_id)
        conn.execute("DELETE FROM journal_entry_lines WHERE id = ?", (line_id,))
        reorder_lines(conn, entry_id)
        total_debit, total_credit = recompute_totals(conn, entry_id)
    logger.debug("line %s deleted from entry %s", line_id, entry_id)
    return {
        "line_id": line_id,
        "journal_entry_id": entry_id,
        "deleted": True,
        "total_debit": total_debit,
        "total_credit": total_credit,
    }


def fetch_lines(conn, entry_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT l.*, a.code AS account_code, a.name AS account_name
        FROM journal_entry_lines l
        LEFT JOIN accounts a ON a.id = l.account_id
        WHERE l.journal_entry_id = ?
        ORDER BY l.order_number, l.id
        """,
        (entry_id,),
    ).fetchall()
    return [dict(r) for r in rows]
