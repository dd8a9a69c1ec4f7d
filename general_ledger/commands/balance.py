#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""gl balance command."""

from __future__ import annotations

from general_ledger.accounts import find_account
from general_ledger.balances import get_balance, list_balances, rebuild
from general_ledger.database import get_db
from general_ledger.periods import require_period
from general_ledger.utils import print_json


def add_parser(subparsers, parents):
    parser = subparsers.add_parser("balance", help="account balances", parents=parents)
    sub = parser.add_subparsers(dest="balance_cmd")

    show_cmd = sub.add_parser("show", help="balances of a period", parents=parents)
    show_cmd.add_argument("--period-id", type=int, required=True)
    show_cmd.add_argument("--account", help="account code or id")
    show_cmd.set_defaults(func=run_show)

    rebuild_cmd = sub.add_parser("rebuild", help="recompute balances from posted lines", parents=parents)
    rebuild_cmd.add_argument("--period-id", type=int)
    rebuild_cmd.set_defaults(func=run_rebuild)

    return parser


def run_show(args):
    with get_db(args.db_path) as conn:
        period = require_period(conn, args.period_id)
        if args.account:
            account = find_account(conn, args.account)
            balance = get_balance(conn, account["id"], period.id)
            balances = [
                {
                    "account_id": account["id"],
                    "account_code": account["code"],
                    "account_name": account["name"],
                    "balance_type": account["balance_type"],
                    "fiscal_period_id": period.id,
                    "debit_balance": balance.debit_balance,
                    "credit_balance": balance.credit_balance,
                    "net_balance": balance.net_balance,
                }
            ]
        else:
            balances = list_balances(conn, period.id)
    print_json({"fiscal_period_id": period.id, "period": period.name, "balances": balances})


def run_rebuild(args):
    with get_db(args.db_path) as conn:
        if args.period_id is not None:
            require_period(conn, args.period_id)
        rows = rebuild(conn, args.period_id)
    print_json({"status": "success", "fiscal_period_id": args.period_id, "rows": rows})
