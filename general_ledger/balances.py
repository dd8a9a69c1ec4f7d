#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Per-account, per-period balance projection.

``account_balances`` is derived state: every posted entry is applied once,
every reversal unapplies the original lines once, and ``rebuild`` can
always recompute the table from the posted lines.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from general_ledger.database import atomic
from general_ledger.models import AccountBalance, LedgerLine
from general_ledger.models.entry import ENTRY_POSTED, SOURCE_REVERSAL
from general_ledger.utils import now_str, to_amount

logger = logging.getLogger(__name__)


def _line_amounts(line: Any) -> Tuple[int, float, float]:
    if isinstance(line, LedgerLine):
        return line.account_id, line.debit_amount, line.credit_amount
    return (
        line["account_id"],
        to_amount(line["debit_amount"]),
        to_amount(line["credit_amount"]),
    )


def _increment(conn, lines: Iterable[Any], fiscal_period_id: int, sign: int) -> int:
    touched = 0
    updated_at = now_str()
    with atomic(conn):
        for line in lines:
            account_id, debit, credit = _line_amounts(line)
            conn.execute(
                """
                INSERT INTO account_balances
                  (account_id, fiscal_period_id, debit_balance, credit_balance, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(account_id, fiscal_period_id) DO UPDATE SET
                  debit_balance = ROUND(debit_balance + excluded.debit_balance, 2),
                  credit_balance = ROUND(credit_balance + excluded.credit_balance, 2),
                  updated_at = excluded.updated_at
                """,
                (account_id, fiscal_period_id, sign * debit, sign * credit, updated_at),
            )
            touched += 1
    return touched


def apply(conn, lines: Iterable[Any], fiscal_period_id: int) -> int:
    """Add each line's amounts to its account balance. Not idempotent."""
    return _increment(conn, lines, fiscal_period_id, 1)


def unapply(conn, lines: Iterable[Any], fiscal_period_id: int) -> int:
    """Subtract each line's amounts. Balances may go negative."""
    return _increment(conn, lines, fiscal_period_id, -1)


def rebuild(conn, fiscal_period_id: Optional[int] = None) -> int:
    conditions = ["e.status = ?", "COALESCE(e.source_document_type, '') != ?"]
    params: List[Any] = [ENTRY_POSTED, SOURCE_REVERSAL]
    if fiscal_period_id is not None:
        conditions.append("e.fiscal_period_id = ?")
        params.append(fiscal_period_id)

    with atomic(conn):
        if fiscal_period_id is None:
            conn.execute("DELETE FROM account_balances")
        else:
            conn.execute(
                "DELETE FROM account_balances WHERE fiscal_period_id = ?", (fiscal_period_id,)
            )
        cur = conn.execute(
            f"""
            INSERT INTO account_balances
              (account_id, fiscal_period_id, debit_balance, credit_balance, updated_at)
            SELECT l.account_id, e.fiscal_period_id,
                   ROUND(SUM(l.debit_amount), 2), ROUND(SUM(l.credit_amount), 2), ?
            FROM journal_entry_lines l
            JOIN journal_entries e ON e.id = l.journal_entry_id
            WHERE {' AND '.join(conditions)}
            GROUP BY l.account_id, e.fiscal_period_id
            """,
            [now_str(), *params],
        )
    logger.info(
        "balances rebuilt (period=%s, rows=%s)",
        fiscal_period_id if fiscal_period_id is not None else "all",
        cur.rowcount,
    )
    return cur.rowcount


def get_balance(conn, account_id: int, fiscal_period_id: int) -> AccountBalance:
    row = conn.execute(
        """
        SELECT debit_balance, credit_balance FROM account_balances
        WHERE account_id = ? AND fiscal_period_id = ?
        """,
        (account_id, fiscal_period_id),
    ).fetchone()
    if not row:
        return AccountBalance(account_id=account_id, fiscal_period_id=fiscal_period_id)
    return AccountBalance(
        account_id=account_id,
        fiscal_period_id=fiscal_period_id,
        debit_balance=row["debit_balance"],
        credit_balance=row["credit_balance"],
    )


def list_balances(conn, fiscal_period_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT b.account_id, a.code AS account_code, a.name AS account_name,
               a.balance_type, b.fiscal_period_id, b.debit_balance, b.credit_balance
        FROM account_balances b
        JOIN accounts a ON a.id = b.account_id
        WHERE b.fiscal_period_id = ?
        ORDER BY a.code
        """,
        (fiscal_period_id,),
    ).fetchall()
    balances = []
    for row in rows:
        item = dict(row)
        item["net_balance"] = round(row["debit_balance"] - row["credit_balance"], 2)
        balances.append(item)
    return balances
