#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Voucher models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

VOUCHER_DRAFT = "DRAFT"
VOUCHER_VALIDATED = "VALIDATED"
VOUCHER_APPROVED = "APPROVED"
VOUCHER_CANCELLED = "CANCELLED"

VOUCHER_STATUSES = (VOUCHER_DRAFT, VOUCHER_VALIDATED, VOUCHER_APPROVED, VOUCHER_CANCELLED)
APPROVABLE_STATUSES = (VOUCHER_DRAFT, VOUCHER_VALIDATED)


@dataclass
class VoucherLine:
    account_id: int
    debit_amount: float = 0.0
    credit_amount: float = 0.0
    description: str | None = None
    third_party_id: int | None = None
    reference: str | None = None


@dataclass
class Voucher:
    id: int | None = None
    voucher_number: str | None = None
    voucher_type_id: int | None = None
    date: str | None = None
    description: str | None = None
    fiscal_period_id: int | None = None
    currency_id: int | None = None
    exchange_rate: float = 1.0
    status: str = VOUCHER_DRAFT
    journal_entry_id: int | None = None
    reversal_journal_entry_id: int | None = None
    lines: List[VoucherLine] | None = None

    @property
    def total_debit(self) -> float:
        return round(sum(line.debit_amount for line in self.lines or []), 2)

    @property
    def total_credit(self) -> float:
        return round(sum(line.credit_amount for line in self.lines or []), 2)

    def is_balanced(self, tolerance: float = 0.01) -> bool:
        return abs(round(self.total_debit - self.total_credit, 2)) <= tolerance
