#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""gl period command."""

from __future__ import annotations

from general_ledger.database import get_db
from general_ledger.periods import close_period, create_period, list_periods, reopen_period
from general_ledger.utils import print_json


def add_parser(subparsers, parents):
    parser = subparsers.add_parser("period", help="fiscal periods", parents=parents)
    sub = parser.add_subparsers(dest="period_cmd")

    create_cmd = sub.add_parser("create", help="create a fiscal period", parents=parents)
    create_cmd.add_argument("--start", required=True, help="start date YYYY-MM-DD")
    create_cmd.add_argument("--end", required=True, help="end date YYYY-MM-DD")
    create_cmd.add_argument("--name", help="period name")
    create_cmd.add_argument("--fiscal-year-id", type=int)
    create_cmd.set_defaults(func=run_create)

    close_cmd = sub.add_parser("close", help="close a period", parents=parents)
    close_cmd.add_argument("period_id", type=int)
    close_cmd.add_argument("--actor-id", type=int)
    close_cmd.set_defaults(func=run_close)

    reopen_cmd = sub.add_parser("reopen", help="reopen a period", parents=parents)
    reopen_cmd.add_argument("period_id", type=int)
    reopen_cmd.set_defaults(func=run_reopen)

    list_cmd = sub.add_parser("list", help="list periods", parents=parents)
    list_cmd.add_argument("--status", help="open/closed")
    list_cmd.set_defaults(func=run_list)

    return parser


def run_create(args):
    with get_db(args.db_path) as conn:
        period_id = create_period(conn, args.start, args.end, args.name, args.fiscal_year_id)
    print_json({"status": "success", "fiscal_period_id": period_id})


def run_close(args):
    with get_db(args.db_path) as conn:
        result = close_period(conn, args.period_id, args.actor_id)
    print_json({"status": "success", **result})


def run_reopen(args):
    with get_db(args.db_path) as conn:
        result = reopen_period(conn, args.period_id)
    print_json({"status": "success", **result})


def run_list(args):
    with get_db(args.db_path) as conn:
        periods = list_periods(conn, args.status)
    print_json({"periods": periods})
