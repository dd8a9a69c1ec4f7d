#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Bank side effects of posting and reversing ledger entries."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional

from general_ledger.database import atomic
from general_ledger.models import BankTransaction, LedgerLine
from general_ledger.utils import NotFoundError, ValidationError, now_str, to_amount

logger = logging.getLogger(__name__)

TX_DEPOSIT = "deposit"
TX_WITHDRAWAL = "withdrawal"
TX_CLEARED = "cleared"
TX_VOIDED = "voided"
DOCUMENT_TYPE = "journal_entry"


class BankSideEffectNotifier:
    """Contract for reacting to ledger lines that touch bank accounts.

    Implementations are invoked after the ledger transaction committed;
    anything they raise is logged by the caller and never undoes the
    ledger change.
    """

    def has_bank_account_lines(self, conn, lines: Iterable[Any]) -> bool:
        raise NotImplementedError

    def process_for_bank_transactions(
        self, conn, entry_id: int, lines: Iterable[Any]
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def void_bank_transactions_by_entry(
        self, conn, entry_id: int, actor_id: Optional[int], reason: str
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError


class NullBankNotifier(BankSideEffectNotifier):
    def has_bank_account_lines(self, conn, lines):
        return False

    def process_for_bank_transactions(self, conn, entry_id, lines):
        return []

    def void_bank_transactions_by_entry(self, conn, entry_id, actor_id, reason):
        return []


def _account_id(line: Any) -> int:
    if isinstance(line, LedgerLine):
        return line.account_id
    return line["account_id"]


def _amounts(line: Any) -> tuple[float, float]:
    if isinstance(line, LedgerLine):
        return line.debit_amount, line.credit_amount
    return to_amount(line["debit_amount"]), to_amount(line["credit_amount"])


def _description(line: Any) -> str:
    if isinstance(line, LedgerLine):
        return line.description or ""
    try:
        return line["description"] or ""
    except (KeyError, IndexError):
        return ""


class SqliteBankNotifier(BankSideEffectNotifier):
    """Records bank transactions in ``bank_transactions`` for bank GL lines."""

    def _bank_accounts_by_gl(self, conn) -> Dict[int, Dict[str, Any]]:
        rows = conn.execute(
            "SELECT * FROM bank_accounts WHERE is_active = 1"
        ).fetchall()
        return {row["gl_account_id"]: dict(row) for row in rows}

    def has_bank_account_lines(self, conn, lines):
        bank_gl = self._bank_accounts_by_gl(conn)
        return any(_account_id(line) in bank_gl for line in lines)

    def process_for_bank_transactions(self, conn, entry_id, lines):
        created: List[Dict[str, Any]] = []
        with atomic(conn):
            entry = conn.execute(
                "SELECT entry_number, date, description, third_party_id, created_by "
                "FROM journal_entries WHERE id = ?",
                (entry_id,),
            ).fetchone()
            if not entry:
                raise NotFoundError(f"Journal entry not found: {entry_id}")
            bank_gl = self._bank_accounts_by_gl(conn)
            for line in lines:
                bank = bank_gl.get(_account_id(line))
                if bank is None:
                    continue
                debit, credit = _amounts(line)
                if debit > 0:
                    tx_type, amount, delta = TX_DEPOSIT, debit, debit
                else:
                    tx_type, amount, delta = TX_WITHDRAWAL, credit, -credit
                conn.execute(
                    """
                    UPDATE bank_accounts
                    SET current_balance = ROUND(current_balance + ?, 2), updated_at = ?
                    WHERE id = ?
                    """,
                    (delta, now_str(), bank["id"]),
                )
                running = conn.execute(
                    "SELECT current_balance FROM bank_accounts WHERE id = ?", (bank["id"],)
                ).fetchone()["current_balance"]
                cur = conn.execute(
                    """
                    INSERT INTO bank_transactions (
                      bank_account_id, transaction_type, reference_number, date,
                      description, amount, running_balance, status, document_type,
                      document_id, third_party_id, journal_entry_id, created_by
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        bank["id"],
                        tx_type,
                        entry["entry_number"],
                        entry["date"],
                        _description(line) or entry["description"] or "",
                        amount,
                        running,
                        TX_CLEARED,
                        DOCUMENT_TYPE,
                        entry_id,
                        entry["third_party_id"],
                        entry_id,
                        entry["created_by"],
                    ),
                )
                created.append(
                    asdict(
                        BankTransaction(
                            id=cur.lastrowid,
                            bank_account_id=bank["id"],
                            transaction_type=tx_type,
                            amount=amount,
                            date=entry["date"],
                            reference_number=entry["entry_number"],
                            running_balance=running,
                            journal_entry_id=entry_id,
                        )
                    )
                )
        logger.info(
            "entry %s produced %d bank transaction(s)", entry_id, len(created)
        )
        return created

    def void_bank_transactions_by_entry(self, conn, entry_id, actor_id, reason):
        voided: List[Dict[str, Any]] = []
        voided_at = now_str()
        with atomic(conn):
            rows = conn.execute(
                """
                SELECT * FROM bank_transactions
                WHERE journal_entry_id = ? AND status != ?
                ORDER BY id
                """,
                (entry_id, TX_VOIDED),
            ).fetchall()
            for row in rows:
                delta = -row["amount"] if row["transaction_type"] == TX_DEPOSIT else row["amount"]
                conn.execute(
                    """
                    UPDATE bank_transactions
                    SET status = ?, voided_by = ?, voided_at = ?, void_reason = ?
                    WHERE id = ?
                    """,
                    (TX_VOIDED, actor_id, voided_at, reason, row["id"]),
                )
                conn.execute(
                    """
                    UPDATE bank_accounts
                    SET current_balance = ROUND(current_balance + ?, 2), updated_at = ?
                    WHERE id = ?
                    """,
                    (delta, voided_at, row["bank_account_id"]),
                )
                item = dict(row)
                item.update(
                    {"status": TX_VOIDED, "voided_by": actor_id, "voided_at": voided_at,
                     "void_reason": reason}
                )
                voided.append(item)
        logger.info("entry %s voided %d bank transaction(s)", entry_id, len(voided))
        return voided

    def list_by_entry(self, conn, entry_id: int) -> List[Dict[str, Any]]:
        return list_bank_transactions(conn, entry_id)


def list_bank_transactions(conn, entry_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT * FROM bank_transactions WHERE journal_entry_id = ? ORDER BY id",
        (entry_id,),
    ).fetchall()
    return [dict(r) for r in rows]


def add_bank_account(
    conn,
    account_number: str,
    name: str,
    gl_account_id: int,
    bank_name: Optional[str] = None,
    opening_balance: float = 0.0,
) -> int:
    if not account_number or not name:
        raise ValidationError("Bank account requires account_number and name")
    with atomic(conn):
        cur = conn.execute(
            """
            INSERT INTO bank_accounts (account_number, name, bank_name, gl_account_id, current_balance)
            VALUES (?, ?, ?, ?, ?)
            """,
            (account_number, name, bank_name, gl_account_id, to_amount(opening_balance)),
        )
    return int(cur.lastrowid)


def get_bank_account(conn, bank_account_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute("SELECT * FROM bank_accounts WHERE id = ?", (bank_account_id,)).fetchone()
    return dict(row) if row else None


def default_notifier(config: Dict[str, Any]) -> BankSideEffectNotifier:
    settings = config.get("bank_notifier") or {}
    if not settings.get("enabled", True):
        return NullBankNotifier()
    return SqliteBankNotifier()
