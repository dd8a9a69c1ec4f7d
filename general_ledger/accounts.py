#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Chart of accounts and third parties (lookup side only)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from general_ledger.database import atomic
from general_ledger.utils import NotFoundError, ValidationError


def load_accounts(conn, accounts: List[Dict[str, Any]]) -> int:
    loaded = 0
    with atomic(conn):
        for acc in accounts:
            if not acc.get("code") or not acc.get("name"):
                raise ValidationError("Account requires code and name", {"account": acc})
            balance_type = acc.get("balance_type") or acc.get("direction") or "debit"
            if balance_type not in {"debit", "credit"}:
                raise ValidationError(f"Invalid balance_type: {balance_type}")
            if acc.get("id") is not None:
                conn.execute(
                    """
                    INSERT INTO accounts (id, code, name, balance_type, is_active)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(code) DO UPDATE SET
                      name = excluded.name,
                      balance_type = excluded.balance_type,
                      is_active = excluded.is_active
                    """,
                    (acc["id"], acc["code"], acc["name"], balance_type, int(acc.get("is_active", True))),
                )
            else:
                conn.execute(
                    """
                    INSERT INTO accounts (code, name, balance_type, is_active)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(code) DO UPDATE SET
                      name = excluded.name,
                      balance_type = excluded.balance_type,
                      is_active = excluded.is_active
                    """,
                    (acc["code"], acc["name"], balance_type, int(acc.get("is_active", True))),
                )
            if acc.get("is_bank"):
                row = conn.execute(
                    "SELECT id FROM accounts WHERE code = ?", (acc["code"],)
                ).fetchone()
                conn.execute(
                    """
                    INSERT OR IGNORE INTO bank_accounts (account_number, name, bank_name, gl_account_id)
                    VALUES (?, ?, ?, ?)
                    """,
                    (acc.get("account_number") or acc["code"], acc["name"], acc.get("bank_name"), row["id"]),
                )
            loaded += 1
    return loaded


def get_account(conn, account_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute("SELECT * FROM accounts WHERE id = ?", (account_id,)).fetchone()
    return dict(row) if row else None


def find_account(conn, identifier: Any) -> Dict[str, Any]:
    """Resolve an account by code, falling back to numeric id."""
    row = conn.execute("SELECT * FROM accounts WHERE code = ?", (str(identifier),)).fetchone()
    if not row and str(identifier).isdigit():
        row = conn.execute("SELECT * FROM accounts WHERE id = ?", (int(identifier),)).fetchone()
    if not row:
        raise NotFoundError(f"Account not found: {identifier}", code="ACCOUNT_NOT_FOUND")
    return dict(row)


def list_accounts(conn) -> List[Dict[str, Any]]:
    rows = conn.execute("SELECT * FROM accounts ORDER BY code").fetchall()
    return [dict(r) for r in rows]


def create_third_party(conn, code: str, name: str) -> int:
    with atomic(conn):
        cur = conn.execute(
            "INSERT INTO third_parties (code, name) VALUES (?, ?)", (code, name)
        )
    return int(cur.lastrowid)
