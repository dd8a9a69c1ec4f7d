#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Ledger entries: draft -> posted -> reversed.

Every mutation runs inside ``atomic`` so header, lines and balances are
written together or not at all. Bank side effects are queued with
``conn.on_commit`` and only run once the ledger change is committed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from general_ledger import balances
from general_ledger.bank import BankSideEffectNotifier, default_notifier, list_bank_transactions
from general_ledger.config import load_config
from general_ledger.database import atomic
from general_ledger.lines import fetch_lines, insert_lines, recompute_totals, validate_line
from general_ledger.models import LedgerEntry, LedgerLine
from general_ledger.models.entry import (
    ENTRY_DRAFT,
    ENTRY_POSTED,
    ENTRY_REVERSED,
    ENTRY_STATUSES,
    SOURCE_REVERSAL,
)
from general_ledger.periods import assert_period_open
from general_ledger.sequences import generate_entry_number
from general_ledger.utils import (
    InvalidStateError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationError,
    balance_details,
    is_balanced,
    now_str,
    today_str,
)

logger = logging.getLogger(__name__)

HEADER_FIELDS = (
    "date",
    "fiscal_period_id",
    "reference",
    "description",
    "third_party_id",
    "is_adjustment",
    "is_recurring",
    "source_document_type",
    "source_document_id",
)


def _settings(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return config if config is not None else load_config()


def _validate_header(header: Dict[str, Any]) -> None:
    if not isinstance(header, dict):
        raise ValidationError("Entry header must be an object")
    missing = [field for field in ("date", "fiscal_period_id") if not header.get(field)]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}", {"missing": missing}
        )
    if header.get("source_document_type") == SOURCE_REVERSAL:
        raise ValidationError(
            "Reversal entries are only created by reversing a posted entry",
            {"source_document_type": SOURCE_REVERSAL},
        )


def _parse_lines(lines: Any, third_party_id: Optional[int]) -> list:
    if not isinstance(lines, list):
        raise ValidationError("lines must be a list")
    parsed = []
    for index, raw in enumerate(lines, start=1):
        try:
            line = validate_line(raw)
        except ValidationError as exc:
            details = dict(exc.details or {})
            details["line"] = index
            exc.details = details
            raise
        if line.third_party_id is None:
            line.third_party_id = third_party_id
        parsed.append(line)
    return parsed


def _get_entry_row(conn, entry_id: int) -> Dict[str, Any]:
    row = conn.execute("SELECT * FROM journal_entries WHERE id = ?", (entry_id,)).fetchone()
    if not row:
        raise NotFoundError(f"Journal entry not found: {entry_id}", code="ENTRY_NOT_FOUND")
    return dict(row)


def _queue_bank_hook(conn, config, name: str, func) -> None:
    attempts = (config.get("bank_notifier") or {}).get("max_attempts", 1)
    conn.on_commit(func, name=name, attempts=attempts)


def create_entry(
    conn,
    header: Dict[str, Any],
    lines: List[Any],
    actor_id: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Create a draft entry with its lines.

    The caller-supplied ``status`` is ignored. ``entry_number`` is generated
    from ``entry_type`` when not supplied.
    """
    settings = _settings(config)
    _validate_header(header)
    draft = LedgerEntry(lines=_parse_lines(lines, header.get("third_party_id")))
    draft.recompute_totals()
    parsed, total_debit, total_credit = draft.lines, draft.total_debit, draft.total_credit

    with atomic(conn):
        assert_period_open(conn, header["fiscal_period_id"])
        entry_number = header.get("entry_number") or generate_entry_number(
            conn, header.get("entry_type") or settings["default_entry_type"]
        )
        cur = conn.execute(
            """
            INSERT INTO journal_entries (
              entry_number, date, fiscal_period_id, reference, description,
              third_party_id, status, total_debit, total_credit, is_adjustment,
              is_recurring, source_document_type, source_document_id, created_by
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry_number,
                header["date"],
                header["fiscal_period_id"],
                header.get("reference") or "",
                header.get("description"),
                header.get("third_party_id"),
                ENTRY_DRAFT,
                total_debit,
                total_credit,
                int(bool(header.get("is_adjustment"))),
                int(bool(header.get("is_recurring"))),
                header.get("source_document_type"),
                header.get("source_document_id"),
                actor_id,
            ),
        )
        entry_id = int(cur.lastrowid)
        insert_lines(conn, entry_id, parsed)

    logger.info("entry %s created as %s (%d lines)", entry_number, ENTRY_DRAFT, len(parsed))
    return {
        "id": entry_id,
        "entry_number": entry_number,
        "status": ENTRY_DRAFT,
        "total_debit": total_debit,
        "total_credit": total_credit,
    }


def update_entry(
    conn,
    entry_id: int,
    header: Dict[str, Any],
    lines: Optional[List[Any]] = None,
) -> Dict[str, Any]:
    """Update a draft entry. ``lines``, when given, replace all existing lines."""
    if not isinstance(header, dict):
        raise ValidationError("Entry header must be an object")

    with atomic(conn):
        current = _get_entry_row(conn, entry_id)
        if current["status"] != ENTRY_DRAFT:
            raise InvalidStateError(
                f"Only draft entries can be updated (status: {current['status']})",
                {"journal_entry_id": entry_id, "status": current["status"]},
            )
        merged = dict(current)
        for field in HEADER_FIELDS:
            if field in header:
                merged[field] = header[field]
        _validate_header(merged)
        parsed = None
        if lines is not None:
            parsed = _parse_lines(lines, merged.get("third_party_id"))
        assert_period_open(conn, merged["fiscal_period_id"])

        conn.execute(
            """
            UPDATE journal_entries
            SET date = ?, fiscal_period_id = ?, reference = ?, description = ?,
                third_party_id = ?, is_adjustment = ?, is_recurring = ?,
                source_document_type = ?, source_document_id = ?
            WHERE id = ?
            """,
            (
                merged["date"],
                merged["fiscal_period_id"],
                merged.get("reference") or "",
                merged.get("description"),
                merged.get("third_party_id"),
                int(bool(merged.get("is_adjustment"))),
                int(bool(merged.get("is_recurring"))),
                merged.get("source_document_type"),
                merged.get("source_document_id"),
                entry_id,
            ),
        )
        if parsed is not None:
            conn.execute("DELETE FROM journal_entry_lines WHERE journal_entry_id = ?", (entry_id,))
            insert_lines(conn, entry_id, parsed)
        total_debit, total_credit = recompute_totals(conn, entry_id)

    logger.info("entry %s updated", current["entry_number"])
    return {
        "id": entry_id,
        "entry_number": current["entry_number"],
        "status": ENTRY_DRAFT,
        "total_debit": total_debit,
        "total_credit": total_credit,
    }


def post_entry(
    conn,
    entry_id: int,
    actor_id: Optional[int] = None,
    notifier: Optional[BankSideEffectNotifier] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Post a balanced draft entry and apply it to account balances."""
    settings = _settings(config)
    notifier = notifier or default_notifier(settings)

    with atomic(conn):
        entry = _get_entry_row(conn, entry_id)
        if entry["status"] != ENTRY_DRAFT:
            raise InvalidStateError(
                f"Only draft entries can be posted (status: {entry['status']})",
                {"journal_entry_id": entry_id, "status": entry["status"]},
            )
        assert_period_open(conn, entry["fiscal_period_id"])
        lines = fetch_lines(conn, entry_id)
        if not lines:
            raise ValidationError(
                "Cannot post an entry without lines", {"journal_entry_id": entry_id}
            )
        total_debit, total_credit = recompute_totals(conn, entry_id)
        if not is_balanced(total_debit, total_credit, settings["balance_tolerance"]):
            logger.warning(
                "entry %s rejected: debit %.2f != credit %.2f",
                entry["entry_number"],
                total_debit,
                total_credit,
            )
            raise UnbalancedEntryError(
                "Journal entry is not balanced", balance_details(total_debit, total_credit)
            )

        posted_at = now_str()
        cur = conn.execute(
            """
            UPDATE journal_entries
            SET status = ?, posted_by = ?, posted_at = ?
            WHERE id = ? AND status = ?
            """,
            (ENTRY_POSTED, actor_id, posted_at, entry_id, ENTRY_DRAFT),
        )
        if cur.rowcount != 1:
            raise InvalidStateError(
                "Journal entry changed state concurrently", {"journal_entry_id": entry_id}
            )
        balances.apply(conn, lines, entry["fiscal_period_id"])

        def notify_posted(hook_conn) -> None:
            if notifier.has_bank_account_lines(hook_conn, lines):
                notifier.process_for_bank_transactions(hook_conn, entry_id, lines)

        _queue_bank_hook(conn, settings, f"bank:post:{entry_id}", notify_posted)

    logger.info("entry %s posted", entry["entry_number"])
    return {
        "id": entry_id,
        "entry_number": entry["entry_number"],
        "status": ENTRY_POSTED,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "posted_at": posted_at,
    }


def reverse_entry(
    conn,
    entry_id: int,
    actor_id: Optional[int] = None,
    reason: Optional[str] = None,
    notifier: Optional[BankSideEffectNotifier] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Reverse a posted entry with a self-posted compensating entry.

    The original lines are unapplied from the balances; the compensating
    entry's lines are not applied on top, so the net effect is zero.
    """
    settings = _settings(config)
    notifier = notifier or default_notifier(settings)

    with atomic(conn):
        original = _get_entry_row(conn, entry_id)
        if original["status"] != ENTRY_POSTED:
            raise InvalidStateError(
                f"Only posted entries can be reversed (status: {original['status']})",
                {"journal_entry_id": entry_id, "status": original["status"]},
            )
        if original["source_document_type"] == SOURCE_REVERSAL:
            raise InvalidStateError(
                "A reversal entry cannot itself be reversed",
                {"journal_entry_id": entry_id},
            )
        assert_period_open(conn, original["fiscal_period_id"])

        original_number = original["entry_number"]
        reversal_number = f"{settings['reversal_prefix']}-{original_number}"
        now = now_str()
        original_lines = fetch_lines(conn, entry_id)

        cur = conn.execute(
            """
            INSERT INTO journal_entries (
              entry_number, date, fiscal_period_id, reference, description,
              third_party_id, status, total_debit, total_credit, is_adjustment,
              source_document_type, source_document_id, created_by, posted_by, posted_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?, ?, ?, ?)
            """,
            (
                reversal_number,
                today_str(),
                original["fiscal_period_id"],
                f"Reversal of {original_number}",
                reason or f"Reversal of entry {original_number}",
                original["third_party_id"],
                ENTRY_POSTED,
                original["total_credit"],
                original["total_debit"],
                SOURCE_REVERSAL,
                entry_id,
                actor_id,
                actor_id,
                now,
            ),
        )
        reversal_id = int(cur.lastrowid)
        reversal_lines = []
        for row in original_lines:
            line = LedgerLine.from_dict(row).swapped()
            line.description = f"Reversal: {row['description'] or ''}".strip()
            reversal_lines.append(line)
        insert_lines(conn, reversal_id, reversal_lines)
        recompute_totals(conn, reversal_id)

        conn.execute(
            """
            UPDATE journal_entries
            SET status = ?, reversed_by = ?, reversed_at = ?, reversal_reason = ?,
                reversal_entry_id = ?
            WHERE id = ?
            """,
            (ENTRY_REVERSED, actor_id, now, reason, reversal_id, entry_id),
        )
        balances.unapply(conn, original_lines, original["fiscal_period_id"])

        def notify_reversed(hook_conn) -> None:
            notifier.void_bank_transactions_by_entry(
                hook_conn, entry_id, actor_id, f"Entry reversed: {reason or ''}".strip()
            )

        _queue_bank_hook(conn, settings, f"bank:reverse:{entry_id}", notify_reversed)

    logger.info("entry %s reversed by %s", original_number, reversal_number)
    return {
        "original_id": entry_id,
        "reversal_id": reversal_id,
        "reversal_entry_number": reversal_number,
        "status": ENTRY_REVERSED,
        "reason": reason,
    }


def delete_entry(conn, entry_id: int) -> Dict[str, Any]:
    with atomic(conn):
        entry = _get_entry_row(conn, entry_id)
        if entry["status"] != ENTRY_DRAFT:
            raise InvalidStateError(
                f"Only draft entries can be deleted (status: {entry['status']})",
                {"journal_entry_id": entry_id, "status": entry["status"]},
            )
        conn.execute("DELETE FROM journal_entry_lines WHERE journal_entry_id = ?", (entry_id,))
        conn.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,))
    logger.info("entry %s deleted", entry["entry_number"])
    return {"id": entry_id, "entry_number": entry["entry_number"], "deleted": True}


def fetch_entry(conn, entry_id: int, with_lines: bool = True) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        """
        SELECT e.*, p.name AS fiscal_period_name, t.name AS third_party_name
        FROM journal_entries e
        LEFT JOIN fiscal_periods p ON p.id = e.fiscal_period_id
        LEFT JOIN third_parties t ON t.id = e.third_party_id
        WHERE e.id = ?
        """,
        (entry_id,),
    ).fetchone()
    if not row:
        return None
    entry = dict(row)
    entry["is_adjustment"] = bool(entry["is_adjustment"])
    entry["is_recurring"] = bool(entry["is_recurring"])
    if with_lines:
        entry["lines"] = fetch_lines(conn, entry_id)
    return entry


def list_entries(
    conn,
    entry_number: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    status: Optional[str] = None,
    fiscal_period_id: Optional[int] = None,
    third_party_id: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    conditions = ["1=1"]
    params: List[Any] = []
    if entry_number:
        conditions.append("entry_number LIKE ?")
        params.append(f"%{entry_number}%")
    if date_from:
        conditions.append("date >= ?")
        params.append(date_from)
    if date_to:
        conditions.append("date <= ?")
        params.append(date_to)
    if status:
        if status not in ENTRY_STATUSES:
            raise ValidationError(f"Invalid entry status: {status}")
        conditions.append("status = ?")
        params.append(status)
    if fiscal_period_id is not None:
        conditions.append("fiscal_period_id = ?")
        params.append(fiscal_period_id)
    if third_party_id is not None:
        conditions.append("third_party_id = ?")
        params.append(third_party_id)

    sql = f"SELECT * FROM journal_entries WHERE {' AND '.join(conditions)} ORDER BY date DESC, id DESC"
    if limit:
        sql += " LIMIT ?"
        params.append(int(limit))
    return [dict(r) for r in conn.execute(sql, params).fetchall()]


def get_bank_transactions(conn, entry_id: int) -> List[Dict[str, Any]]:
    return list_bank_transactions(conn, entry_id)


def affects_bank_accounts(conn, entry_id: int) -> bool:
    row = conn.execute(
        """
        SELECT 1
        FROM journal_entry_lines l
        JOIN bank_accounts b ON b.gl_account_id = l.account_id AND b.is_active = 1
        WHERE l.journal_entry_id = ?
        LIMIT 1
        """,
        (entry_id,),
    ).fetchone()
    return row is not None


def validate_bank_sync(conn, entry_id: int) -> Dict[str, Any]:
    """Compare the bank lines of an entry with its recorded bank transactions."""
    entry = _get_entry_row(conn, entry_id)
    bank_lines = conn.execute(
        """
        SELECT l.id, l.account_id, l.debit_amount, l.credit_amount, b.id AS bank_account_id
        FROM journal_entry_lines l
        JOIN bank_accounts b ON b.gl_account_id = l.account_id AND b.is_active = 1
        WHERE l.journal_entry_id = ?
        ORDER BY l.order_number
        """,
        (entry_id,),
    ).fetchall()
    expected = len(bank_lines) if entry["status"] == ENTRY_POSTED else 0
    transactions = [
        tx for tx in list_bank_transactions(conn, entry_id) if tx["status"] != "voided"
    ]
    discrepancies: List[Dict[str, Any]] = []
    if expected != len(transactions):
        discrepancies.append(
            {
                "type": "count_mismatch",
                "expected": expected,
                "actual": len(transactions),
            }
        )
    if expected:
        remaining = list(transactions)
        for line in bank_lines:
            amount = line["debit_amount"] or line["credit_amount"]
            match = next(
                (
                    tx
                    for tx in remaining
                    if tx["bank_account_id"] == line["bank_account_id"]
                    and abs(tx["amount"] - amount) < 0.005
                ),
                None,
            )
            if match is None:
                discrepancies.append(
                    {"type": "missing_transaction", "line_id": line["id"], "amount": amount}
                )
            else:
                remaining.remove(match)
    return {
        "journal_entry_id": entry_id,
        "expected_transactions": expected,
        "actual_transactions": len(transactions),
        "is_synchronized": not discrepancies,
        "discrepancies": discrepancies,
    }
