#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Ledger line model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from general_ledger.utils import InvalidLineError, to_amount


@dataclass
class LedgerLine:
    account_id: int | None
    debit_amount: float = 0.0
    credit_amount: float = 0.0
    description: str = ""
    third_party_id: int | None = None
    order_number: int | None = None
    id: int | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerLine":
        return cls(
            account_id=data.get("account_id"),
            debit_amount=to_amount(data.get("debit_amount", data.get("debit"))),
            credit_amount=to_amount(data.get("credit_amount", data.get("credit"))),
            description=data.get("description") or "",
            third_party_id=data.get("third_party_id"),
            order_number=data.get("order_number"),
            id=data.get("id"),
        )

    def validate(self) -> None:
        """Exactly one side carries a positive amount."""
        if self.account_id is None:
            raise InvalidLineError("Line is missing account_id")
        if self.debit_amount < 0 or self.credit_amount < 0:
            raise InvalidLineError(
                "Line amounts cannot be negative",
                {"debit_amount": self.debit_amount, "credit_amount": self.credit_amount},
            )
        if (self.debit_amount > 0) == (self.credit_amount > 0):
            raise InvalidLineError(
                "A line must carry either a debit or a credit amount, not both and not neither",
                {"debit_amount": self.debit_amount, "credit_amount": self.credit_amount},
            )

    def swapped(self) -> "LedgerLine":
        return LedgerLine(
            account_id=self.account_id,
            debit_amount=self.credit_amount,
            credit_amount=self.debit_amount,
            description=self.description,
            third_party_id=self.third_party_id,
            order_number=self.order_number,
        )
