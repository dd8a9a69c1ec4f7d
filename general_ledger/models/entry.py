#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Ledger entry model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from general_ledger.models.line import LedgerLine
from general_ledger.utils import is_balanced

ENTRY_DRAFT = "draft"
ENTRY_POSTED = "posted"
ENTRY_REVERSED = "reversed"

ENTRY_STATUSES = (ENTRY_DRAFT, ENTRY_POSTED, ENTRY_REVERSED)

SOURCE_REVERSAL = "reversal"
SOURCE_VOUCHER = "accounting_voucher"


@dataclass
class LedgerEntry:
    id: int | None = None
    entry_number: str | None = None
    date: str | None = None
    fiscal_period_id: int | None = None
    reference: str = ""
    description: str | None = None
    third_party_id: int | None = None
    status: str = ENTRY_DRAFT
    total_debit: float = 0.0
    total_credit: float = 0.0
    is_adjustment: bool = False
    is_recurring: bool = False
    source_document_type: str | None = None
    source_document_id: int | None = None
    created_by: int | None = None
    posted_by: int | None = None
    posted_at: str | None = None
    lines: List[LedgerLine] = field(default_factory=list)

    def recompute_totals(self) -> None:
        self.total_debit = round(sum(line.debit_amount for line in self.lines), 2)
        self.total_credit = round(sum(line.credit_amount for line in self.lines), 2)

    def is_balanced(self, tolerance: float = 0.01) -> bool:
        return is_balanced(self.total_debit, self.total_credit, tolerance)
