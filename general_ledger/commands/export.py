#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""gl export command."""

from __future__ import annotations

from general_ledger.database import get_db
from general_ledger.exports import export_balances, export_journal_book, export_vouchers
from general_ledger.utils import print_json


def add_parser(subparsers, parents):
    parser = subparsers.add_parser("export", help="Excel exports", parents=parents)
    sub = parser.add_subparsers(dest="export_cmd")

    journal_cmd = sub.add_parser("journal", help="journal book", parents=parents)
    journal_cmd.add_argument("--output", required=True, help=".xlsx path")
    journal_cmd.add_argument("--period-id", type=int)
    journal_cmd.add_argument("--status")
    journal_cmd.add_argument("--date-from")
    journal_cmd.add_argument("--date-to")
    journal_cmd.set_defaults(func=run_journal)

    vouchers_cmd = sub.add_parser("vouchers", help="vouchers", parents=parents)
    vouchers_cmd.add_argument("--output", required=True, help=".xlsx path")
    vouchers_cmd.add_argument("--status")
    vouchers_cmd.add_argument("--start-date")
    vouchers_cmd.add_argument("--end-date")
    vouchers_cmd.set_defaults(func=run_vouchers)

    balances_cmd = sub.add_parser("balances", help="account balances", parents=parents)
    balances_cmd.add_argument("--output", required=True, help=".xlsx path")
    balances_cmd.add_argument("--period-id", type=int, required=True)
    balances_cmd.set_defaults(func=run_balances)

    return parser


def run_journal(args):
    with get_db(args.db_path) as conn:
        result = export_journal_book(
            conn,
            args.output,
            fiscal_period_id=args.period_id,
            status=args.status,
            date_from=args.date_from,
            date_to=args.date_to,
        )
    print_json({"status": "success", **result})


def run_vouchers(args):
    with get_db(args.db_path) as conn:
        result = export_vouchers(
            conn,
            args.output,
            status=args.status,
            start_date=args.start_date,
            end_date=args.end_date,
        )
    print_json({"status": "success", **result})


def run_balances(args):
    with get_db(args.db_path) as conn:
        result = export_balances(conn, args.output, args.period_id)
    print_json({"status": "success", **result})
