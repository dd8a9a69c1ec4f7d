#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""gl voucher command."""

from __future__ import annotations

from general_ledger.database import get_db
from general_ledger.utils import NotFoundError, load_json_input, print_json
from general_ledger.vouchers import (
    approve_voucher,
    cancel_voucher,
    count_vouchers,
    create_voucher,
    delete_voucher,
    fetch_voucher,
    find_voucher_by_number,
    get_status_history,
    list_vouchers,
    unvalidate_voucher,
    update_voucher,
    validate_voucher,
)


def add_parser(subparsers, parents):
    parser = subparsers.add_parser("voucher", help="accounting vouchers", parents=parents)
    sub = parser.add_subparsers(dest="voucher_cmd")

    create_cmd = sub.add_parser("create", help="create a voucher from stdin JSON", parents=parents)
    create_cmd.add_argument("--actor-id", type=int)
    create_cmd.set_defaults(func=run_create)

    update_cmd = sub.add_parser("update", help="update a DRAFT voucher from stdin JSON", parents=parents)
    update_cmd.add_argument("voucher_id", type=int)
    update_cmd.add_argument("--actor-id", type=int)
    update_cmd.set_defaults(func=run_update)

    for name, func, help_text in (
        ("validate", run_validate, "DRAFT -> VALIDATED"),
        ("unvalidate", run_unvalidate, "VALIDATED -> DRAFT"),
        ("approve", run_approve, "generate and post the ledger entry"),
    ):
        cmd = sub.add_parser(name, help=help_text, parents=parents)
        cmd.add_argument("voucher_id", type=int)
        cmd.add_argument("--actor-id", type=int)
        cmd.set_defaults(func=func)

    cancel_cmd = sub.add_parser("cancel", help="cancel a voucher", parents=parents)
    cancel_cmd.add_argument("voucher_id", type=int)
    cancel_cmd.add_argument("--reason", required=True, help="cancellation reason")
    cancel_cmd.add_argument("--actor-id", type=int)
    cancel_cmd.set_defaults(func=run_cancel)

    delete_cmd = sub.add_parser("delete", help="delete a DRAFT voucher", parents=parents)
    delete_cmd.add_argument("voucher_id", type=int)
    delete_cmd.set_defaults(func=run_delete)

    show_cmd = sub.add_parser("show", help="show a voucher", parents=parents)
    show_cmd.add_argument("voucher_id", type=int, nargs="?")
    show_cmd.add_argument("--number", help="voucher number")
    show_cmd.set_defaults(func=run_show)

    list_cmd = sub.add_parser("list", help="list vouchers", parents=parents)
    list_cmd.add_argument("--number", help="voucher number contains")
    list_cmd.add_argument("--type-id", type=int)
    list_cmd.add_argument("--status", help="DRAFT/VALIDATED/APPROVED/CANCELLED")
    list_cmd.add_argument("--start-date")
    list_cmd.add_argument("--end-date")
    list_cmd.add_argument("--page", type=int)
    list_cmd.add_argument("--limit", type=int)
    list_cmd.set_defaults(func=run_list)

    history_cmd = sub.add_parser("history", help="status history", parents=parents)
    history_cmd.add_argument("voucher_id", type=int)
    history_cmd.set_defaults(func=run_history)

    return parser


def _split_payload(payload):
    header = {key: value for key, value in payload.items() if key != "lines"}
    return header, payload.get("lines")


def run_create(args):
    header, lines = _split_payload(load_json_input())
    with get_db(args.db_path) as conn:
        result = create_voucher(conn, header, lines, args.actor_id, args.config_data)
    print_json(result)


def run_update(args):
    header, lines = _split_payload(load_json_input())
    with get_db(args.db_path) as conn:
        result = update_voucher(conn, args.voucher_id, header, lines, args.actor_id, args.config_data)
    print_json(result)


def run_validate(args):
    with get_db(args.db_path) as conn:
        result = validate_voucher(conn, args.voucher_id, args.actor_id, args.config_data)
    print_json(result)


def run_unvalidate(args):
    with get_db(args.db_path) as conn:
        result = unvalidate_voucher(conn, args.voucher_id, args.actor_id)
    print_json(result)


def run_approve(args):
    with get_db(args.db_path) as conn:
        result = approve_voucher(conn, args.voucher_id, args.actor_id, config=args.config_data)
    print_json(result)


def run_cancel(args):
    with get_db(args.db_path) as conn:
        result = cancel_voucher(
            conn, args.voucher_id, args.reason, args.actor_id, config=args.config_data
        )
    print_json(result)


def run_delete(args):
    with get_db(args.db_path) as conn:
        result = delete_voucher(conn, args.voucher_id)
    print_json(result)


def run_show(args):
    with get_db(args.db_path) as conn:
        if args.number:
            voucher = find_voucher_by_number(conn, args.number)
        else:
            voucher = fetch_voucher(conn, args.voucher_id) if args.voucher_id else None
    if voucher is None:
        raise NotFoundError(
            f"Voucher not found: {args.number or args.voucher_id}", code="VOUCHER_NOT_FOUND"
        )
    print_json(voucher)


def run_list(args):
    filters = {
        "voucher_number": args.number,
        "voucher_type_id": args.type_id,
        "status": args.status,
        "start_date": args.start_date,
        "end_date": args.end_date,
    }
    with get_db(args.db_path) as conn:
        vouchers = list_vouchers(conn, page=args.page, limit=args.limit, **filters)
        total = count_vouchers(conn, **filters)
    print_json({"total": total, "page": args.page, "vouchers": vouchers})


def run_history(args):
    with get_db(args.db_path) as conn:
        history = get_status_history(conn, args.voucher_id)
    print_json({"voucher_id": args.voucher_id, "history": history})
