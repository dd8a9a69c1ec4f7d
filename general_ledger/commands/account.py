#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""gl account command."""

from __future__ import annotations

from general_ledger.accounts import load_accounts, list_accounts
from general_ledger.database import get_db
from general_ledger.utils import ValidationError, load_json_input, print_json


def add_parser(subparsers, parents):
    parser = subparsers.add_parser("account", help="chart of accounts", parents=parents)
    sub = parser.add_subparsers(dest="account_cmd")

    load_cmd = sub.add_parser("load", help='load accounts from stdin {"accounts": [...]}', parents=parents)
    load_cmd.set_defaults(func=run_load)

    list_cmd = sub.add_parser("list", help="list accounts", parents=parents)
    list_cmd.set_defaults(func=run_list)

    return parser


def run_load(args):
    payload = load_json_input()
    accounts = payload.get("accounts")
    if not isinstance(accounts, list):
        raise ValidationError("accounts must be a list")
    with get_db(args.db_path) as conn:
        loaded = load_accounts(conn, accounts)
    print_json({"status": "success", "accounts_loaded": loaded})


def run_list(args):
    with get_db(args.db_path) as conn:
        accounts = list_accounts(conn)
    for account in accounts:
        account["is_active"] = bool(account["is_active"])
    print_json({"accounts": accounts})
