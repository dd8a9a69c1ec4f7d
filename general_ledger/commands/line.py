#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""gl line command."""

from __future__ import annotations

from general_ledger.database import atomic, get_db
from general_ledger.lines import create_line, delete_line, recompute_totals, reorder_lines, update_line
from general_ledger.utils import load_json_input, print_json


def add_parser(subparsers, parents):
    parser = subparsers.add_parser("line", help="lines of draft entries", parents=parents)
    sub = parser.add_subparsers(dest="line_cmd")

    add_cmd = sub.add_parser("add", help="add a line from stdin JSON", parents=parents)
    add_cmd.add_argument("entry_id", type=int)
    add_cmd.set_defaults(func=run_add)

    update_cmd = sub.add_parser("update", help="replace a line from stdin JSON", parents=parents)
    update_cmd.add_argument("line_id", type=int)
    update_cmd.set_defaults(func=run_update)

    delete_cmd = sub.add_parser("delete", help="delete a line", parents=parents)
    delete_cmd.add_argument("line_id", type=int)
    delete_cmd.set_defaults(func=run_delete)

    reorder_cmd = sub.add_parser("reorder", help="renumber lines 1..N", parents=parents)
    reorder_cmd.add_argument("entry_id", type=int)
    reorder_cmd.set_defaults(func=run_reorder)

    return parser


def run_add(args):
    line = load_json_input()
    with get_db(args.db_path) as conn:
        result = create_line(conn, args.entry_id, line)
    print_json(result)


def run_update(args):
    line = load_json_input()
    with get_db(args.db_path) as conn:
        result = update_line(conn, args.line_id, line)
    print_json(result)


def run_delete(args):
    with get_db(args.db_path) as conn:
        result = delete_line(conn, args.line_id)
    print_json(result)


def run_reorder(args):
    with get_db(args.db_path) as conn:
        with atomic(conn):
            count = reorder_lines(conn, args.entry_id)
            total_debit, total_credit = recompute_totals(conn, args.entry_id)
    print_json(
        {
            "journal_entry_id": args.entry_id,
            "lines": count,
            "total_debit": total_debit,
            "total_credit": total_credit,
        }
    )
