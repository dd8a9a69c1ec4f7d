#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""gl init command."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

from general_ledger.accounts import load_accounts
from general_ledger.database import get_db, init_db
from general_ledger.periods import create_fiscal_year, create_period, find_period_for_date
from general_ledger.utils import LedgerError, print_json

STANDARD_ACCOUNTS = Path("data/standard_accounts.json")


def add_parser(subparsers, parents):
    parser = subparsers.add_parser("init", help="create the schema and load accounts", parents=parents)
    parser.add_argument("--accounts", help="accounts JSON file (default data/standard_accounts.json)")
    parser.set_defaults(func=run)
    return parser


def _month_end(today: date) -> str:
    if today.month == 12:
        return f"{today.year:04d}-12-31"
    next_month = date(today.year, today.month + 1, 1)
    return date.fromordinal(next_month.toordinal() - 1).isoformat()


def run(args):
    accounts = []
    accounts_path = Path(args.accounts) if args.accounts else STANDARD_ACCOUNTS
    if accounts_path.exists():
        try:
            accounts = json.loads(accounts_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise LedgerError("INVALID_JSON", f"Invalid accounts file: {exc}") from exc
    elif args.accounts:
        raise LedgerError("NOT_FOUND", f"Accounts file not found: {accounts_path}")

    today = datetime.now().date()
    with get_db(args.db_path) as conn:
        init_db(conn)
        loaded = load_accounts(conn, accounts) if accounts else 0
        period = find_period_for_date(conn, today.isoformat())
        if period is None:
            year_row = conn.execute(
                "SELECT id FROM fiscal_years WHERE year_number = ?", (today.year,)
            ).fetchone()
            year_id = year_row["id"] if year_row else create_fiscal_year(conn, today.year)
            period_id = create_period(
                conn,
                today.replace(day=1).isoformat(),
                _month_end(today),
                fiscal_year_id=year_id,
            )
        else:
            period_id = period.id

    print_json(
        {
            "status": "success",
            "message": "ledger initialized",
            "accounts_loaded": loaded,
            "current_period_id": period_id,
        }
    )
