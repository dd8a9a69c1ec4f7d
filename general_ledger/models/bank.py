#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Bank transaction model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class BankTransaction:
    id: int | None
    bank_account_id: int
    transaction_type: str
    amount: float
    date: str
    reference_number: str | None = None
    description: str = ""
    running_balance: float = 0.0
    status: str = "cleared"
    journal_entry_id: int | None = None
