#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Account balance model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class AccountBalance:
    account_id: int
    fiscal_period_id: int
    debit_balance: float = 0.0
    credit_balance: float = 0.0

    @property
    def net_balance(self) -> float:
        return round(self.debit_balance - self.credit_balance, 2)
