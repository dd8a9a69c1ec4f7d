# -*- coding: utf-8 -*-
"""
Excel export of the journal book, vouchers and account balances.

Usage:
    export_journal_book(conn, "journal.xlsx", fiscal_period_id=1)
    export_balances(conn, "balances.xlsx", fiscal_period_id=1)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from general_ledger.balances import list_balances
from general_ledger.entries import list_entries
from general_ledger.lines import fetch_lines
from general_ledger.periods import require_period
from general_ledger.vouchers import fetch_voucher_lines, list_vouchers

logger = logging.getLogger(__name__)


class LedgerWorkbook:
    """
    Formatted single-sheet workbook.

        book = LedgerWorkbook("Journal", [("Date", 12), ("Account", 30)])
        book.write_row(["2026-01-05", "1001"])
        book.save("journal.xlsx")
    """

    def __init__(self, title: str, columns: List[tuple]):
        self.wb = Workbook()
        self.ws = self.wb.active
        self.ws.title = title
        self.header_font = Font(bold=True, size=11)
        self.header_fill = PatternFill(start_color="DAEEF3", end_color="DAEEF3", fill_type="solid")
        self.group_fill = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")
        self.thin_border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )
        self.row = 1
        self.data_rows = 0
        self._write_header_row([name for name, _ in columns])
        for col, (_, width) in enumerate(columns, start=1):
            self.ws.column_dimensions[get_column_letter(col)].width = width
        self.ws.freeze_panes = "A2"

    def _write_header_row(self, headers: List[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = self.ws.cell(row=self.row, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.border = self.thin_border
            cell.alignment = Alignment(horizontal="center")
        self.row += 1

    def write_row(self, values: List[Any], group: bool = False, is_total: bool = False) -> None:
        for col, value in enumerate(values, start=1):
            cell = self.ws.cell(row=self.row, column=col, value=value)
            cell.border = self.thin_border
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                cell.number_format = "#,##0.00"
                cell.alignment = Alignment(horizontal="right")
            if group:
                cell.fill = self.group_fill
                cell.font = Font(bold=True)
            if is_total:
                cell.font = Font(bold=True)
        self.row += 1
        self.data_rows += 1

    def save(self, filepath: str) -> Dict[str, Any]:
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        logger.info("exported %d rows to %s", self.data_rows, path)
        return {"path": str(path), "rows": self.data_rows}


JOURNAL_COLUMNS = [
    ("Entry", 18),
    ("Date", 12),
    ("Status", 10),
    ("Account", 14),
    ("Account name", 30),
    ("Description", 40),
    ("Debit", 14),
    ("Credit", 14),
]


def export_journal_book(conn, filepath: str, **filters) -> Dict[str, Any]:
    """One header row per entry followed by its lines, oldest entry first."""
    book = LedgerWorkbook("Journal", JOURNAL_COLUMNS)
    entries = list(reversed(list_entries(conn, **filters)))
    total_debit = 0.0
    total_credit = 0.0
    for entry in entries:
        book.write_row(
            [
                entry["entry_number"],
                entry["date"],
                entry["status"],
                None,
                None,
                entry["description"] or entry["reference"] or "",
                entry["total_debit"],
                entry["total_credit"],
            ],
            group=True,
        )
        for line in fetch_lines(conn, entry["id"]):
            book.write_row(
                [
                    None,
                    None,
                    None,
                    line["account_code"],
                    line["account_name"],
                    line["description"],
                    line["debit_amount"] or None,
                    line["credit_amount"] or None,
                ]
            )
        total_debit += entry["total_debit"]
        total_credit += entry["total_credit"]
    book.write_row(
        ["Total", None, None, None, None, None, round(total_debit, 2), round(total_credit, 2)],
        is_total=True,
    )
    return book.save(filepath)


VOUCHER_COLUMNS = [
    ("Voucher", 16),
    ("Date", 12),
    ("Type", 20),
    ("Status", 12),
    ("Account", 14),
    ("Description", 40),
    ("Debit", 14),
    ("Credit", 14),
]


def export_vouchers(conn, filepath: str, **filters) -> Dict[str, Any]:
    book = LedgerWorkbook("Vouchers", VOUCHER_COLUMNS)
    for voucher in reversed(list_vouchers(conn, **filters)):
        book.write_row(
            [
                voucher["voucher_number"],
                voucher["date"],
                voucher["voucher_type_name"],
                voucher["status"],
                None,
                voucher["description"] or "",
                voucher["total_debit"],
                voucher["total_credit"],
            ],
            group=True,
        )
        for line in fetch_voucher_lines(conn, voucher["id"]):
            book.write_row(
                [
                    None,
                    None,
                    None,
                    None,
                    line["account_code"],
                    line["description"] or "",
                    line["debit_amount"] or None,
                    line["credit_amount"] or None,
                ]
            )
    return book.save(filepath)


BALANCE_COLUMNS = [
    ("Account", 14),
    ("Account name", 30),
    ("Balance type", 12),
    ("Debit", 14),
    ("Credit", 14),
    ("Net", 14),
]


def export_balances(conn, filepath: str, fiscal_period_id: int) -> Dict[str, Any]:
    period = require_period(conn, fiscal_period_id)
    book = LedgerWorkbook("Balances", BALANCE_COLUMNS)
    book.ws.cell(row=1, column=8, value=f"Period: {period.name} ({period.start_date} - {period.end_date})")
    total_debit = 0.0
    total_credit = 0.0
    for item in list_balances(conn, fiscal_period_id):
        book.write_row(
            [
                item["account_code"],
                item["account_name"],
                item["balance_type"],
                item["debit_balance"],
                item["credit_balance"],
                item["net_balance"],
            ]
        )
        total_debit += item["debit_balance"]
        total_credit += item["credit_balance"]
    book.write_row(
        [
            "Total",
            None,
            None,
            round(total_debit, 2),
            round(total_credit, 2),
            round(total_debit - total_credit, 2),
        ],
        is_total=True,
    )
    return book.save(filepath)
