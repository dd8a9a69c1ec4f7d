#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""gl bank command."""

from __future__ import annotations

from general_ledger.accounts import find_account
from general_ledger.bank import add_bank_account, get_bank_account
from general_ledger.database import get_db
from general_ledger.entries import get_bank_transactions, validate_bank_sync
from general_ledger.utils import print_json


def add_parser(subparsers, parents):
    parser = subparsers.add_parser("bank", help="bank accounts and transactions", parents=parents)
    sub = parser.add_subparsers(dest="bank_cmd")

    add_cmd = sub.add_parser("add-account", help="link a bank account to a GL account", parents=parents)
    add_cmd.add_argument("--number", required=True, help="bank account number")
    add_cmd.add_argument("--name", required=True)
    add_cmd.add_argument("--gl-account", required=True, help="GL account code or id")
    add_cmd.add_argument("--bank-name")
    add_cmd.add_argument("--opening-balance", type=float, default=0.0)
    add_cmd.set_defaults(func=run_add_account)

    tx_cmd = sub.add_parser("transactions", help="bank transactions of an entry", parents=parents)
    tx_cmd.add_argument("entry_id", type=int)
    tx_cmd.set_defaults(func=run_transactions)

    sync_cmd = sub.add_parser("sync", help="check an entry against its bank transactions", parents=parents)
    sync_cmd.add_argument("entry_id", type=int)
    sync_cmd.set_defaults(func=run_sync)

    return parser


def run_add_account(args):
    with get_db(args.db_path) as conn:
        account = find_account(conn, args.gl_account)
        bank_account_id = add_bank_account(
            conn,
            args.number,
            args.name,
            account["id"],
            bank_name=args.bank_name,
            opening_balance=args.opening_balance,
        )
        bank_account = get_bank_account(conn, bank_account_id)
    print_json({"status": "success", "bank_account": bank_account})


def run_transactions(args):
    with get_db(args.db_path) as conn:
        transactions = get_bank_transactions(conn, args.entry_id)
    print_json({"journal_entry_id": args.entry_id, "transactions": transactions})


def run_sync(args):
    with get_db(args.db_path) as conn:
        result = validate_bank_sync(conn, args.entry_id)
    print_json(result)
