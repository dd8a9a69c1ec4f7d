#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""gl entry command."""

from __future__ import annotations

from general_ledger.database import get_db
from general_ledger.entries import (
    create_entry,
    delete_entry,
    fetch_entry,
    list_entries,
    post_entry,
    reverse_entry,
    update_entry,
)
from general_ledger.utils import NotFoundError, load_json_input, print_json


def add_parser(subparsers, parents):
    parser = subparsers.add_parser("entry", help="journal entries", parents=parents)
    sub = parser.add_subparsers(dest="entry_cmd")

    create_cmd = sub.add_parser("create", help="create a draft entry from stdin JSON", parents=parents)
    create_cmd.add_argument("--actor-id", type=int)
    create_cmd.set_defaults(func=run_create)

    update_cmd = sub.add_parser("update", help="update a draft entry from stdin JSON", parents=parents)
    update_cmd.add_argument("entry_id", type=int)
    update_cmd.set_defaults(func=run_update)

    post_cmd = sub.add_parser("post", help="post a draft entry", parents=parents)
    post_cmd.add_argument("entry_id", type=int)
    post_cmd.add_argument("--actor-id", type=int)
    post_cmd.set_defaults(func=run_post)

    reverse_cmd = sub.add_parser("reverse", help="reverse a posted entry", parents=parents)
    reverse_cmd.add_argument("entry_id", type=int)
    reverse_cmd.add_argument("--reason", help="reversal reason")
    reverse_cmd.add_argument("--actor-id", type=int)
    reverse_cmd.set_defaults(func=run_reverse)

    delete_cmd = sub.add_parser("delete", help="delete a draft entry", parents=parents)
    delete_cmd.add_argument("entry_id", type=int)
    delete_cmd.set_defaults(func=run_delete)

    show_cmd = sub.add_parser("show", help="show an entry with its lines", parents=parents)
    show_cmd.add_argument("entry_id", type=int)
    show_cmd.set_defaults(func=run_show)

    list_cmd = sub.add_parser("list", help="list entries", parents=parents)
    list_cmd.add_argument("--entry-number")
    list_cmd.add_argument("--date-from")
    list_cmd.add_argument("--date-to")
    list_cmd.add_argument("--status", help="draft/posted/reversed")
    list_cmd.add_argument("--period-id", type=int)
    list_cmd.add_argument("--third-party-id", type=int)
    list_cmd.add_argument("--limit", type=int)
    list_cmd.set_defaults(func=run_list)

    return parser


def _split_payload(payload):
    header = {key: value for key, value in payload.items() if key != "lines"}
    return header, payload.get("lines")


def run_create(args):
    header, lines = _split_payload(load_json_input())
    with get_db(args.db_path) as conn:
        result = create_entry(conn, header, lines if lines is not None else [], args.actor_id, args.config_data)
    print_json(result)


def run_update(args):
    header, lines = _split_payload(load_json_input())
    with get_db(args.db_path) as conn:
        result = update_entry(conn, args.entry_id, header, lines)
    print_json(result)


def run_post(args):
    with get_db(args.db_path) as conn:
        result = post_entry(conn, args.entry_id, args.actor_id, config=args.config_data)
    print_json(result)


def run_reverse(args):
    with get_db(args.db_path) as conn:
        result = reverse_entry(
            conn, args.entry_id, args.actor_id, args.reason, config=args.config_data
        )
    print_json(result)


def run_delete(args):
    with get_db(args.db_path) as conn:
        result = delete_entry(conn, args.entry_id)
    print_json(result)


def run_show(args):
    with get_db(args.db_path) as conn:
        entry = fetch_entry(conn, args.entry_id)
    if entry is None:
        raise NotFoundError(f"Journal entry not found: {args.entry_id}", code="ENTRY_NOT_FOUND")
    print_json(entry)


def run_list(args):
    with get_db(args.db_path) as conn:
        entries = list_entries(
            conn,
            entry_number=args.entry_number,
            date_from=args.date_from,
            date_to=args.date_to,
            status=args.status,
            fiscal_period_id=args.period_id,
            third_party_id=args.third_party_id,
            limit=args.limit,
        )
    print_json({"entries": entries})
