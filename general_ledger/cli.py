#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Main CLI for the general ledger."""

from __future__ import annotations

import argparse
import logging

from general_ledger import commands
from general_ledger.config import load_config
from general_ledger.logging_config import setup_logging
from general_ledger.utils import LedgerError, handle_error

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gl",
        description="Double-entry general ledger CLI (JSON in, JSON out)",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--db-path", default=None, help="SQLite database path")
    common.add_argument("--config", default=None, help="ledger config JSON file")
    common.add_argument("--log-level", default=None, help="DEBUG/INFO/WARNING/ERROR")
    common.add_argument("--log-file", default=None, help="daily-rotated log file")

    subparsers = parser.add_subparsers(dest="command")

    commands.add_init_parser(subparsers, [common])
    commands.add_period_parser(subparsers, [common])
    commands.add_account_parser(subparsers, [common])
    commands.add_entry_parser(subparsers, [common])
    commands.add_line_parser(subparsers, [common])
    commands.add_voucher_parser(subparsers, [common])
    commands.add_balance_parser(subparsers, [common])
    commands.add_bank_parser(subparsers, [common])
    commands.add_export_parser(subparsers, [common])

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    try:
        args.config_data = load_config(args.config)
        args.db_path = args.db_path or args.config_data["db_path"]
        setup_logging(args.log_level or args.config_data["log_level"], args.log_file)
        logger.debug("running %s against %s", args.command, args.db_path)
        args.func(args)
    except LedgerError as exc:
        handle_error(exc)


if __name__ == "__main__":
    main()
