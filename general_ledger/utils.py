#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Shared helpers: error taxonomy, JSON I/O and money arithmetic."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class LedgerError(Exception):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": True,
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class _CodedError(LedgerError):
    default_code = "LEDGER_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(code or self.default_code, message, details)


class ValidationError(_CodedError):
    """Malformed input, rejected before any write."""

    default_code = "VALIDATION_ERROR"


class InvalidLineError(ValidationError):
    default_code = "INVALID_LINE"


class InvalidPeriodError(ValidationError):
    default_code = "INVALID_PERIOD"


class UnbalancedEntryError(_CodedError):
    default_code = "ENTRY_NOT_BALANCED"


class UnbalancedVoucherError(_CodedError):
    default_code = "VOUCHER_NOT_BALANCED"


class InvalidStateError(_CodedError):
    """Operation attempted from the wrong lifecycle state."""

    default_code = "INVALID_STATE"


class NotFoundError(_CodedError):
    default_code = "NOT_FOUND"


class ClosedPeriodError(_CodedError):
    default_code = "PERIOD_CLOSED"


class PersistenceError(_CodedError):
    """Storage or transaction failure; the operation was rolled back."""

    default_code = "PERSISTENCE_ERROR"


def to_amount(value: Any) -> float:
    """Parse a money amount, rounded to cents."""
    if value is None or value == "":
        return 0.0
    try:
        return round(float(value), 2)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc


def balance_details(total_debit: float, total_credit: float) -> Dict[str, float]:
    return {
        "debit_total": round(total_debit, 2),
        "credit_total": round(total_credit, 2),
        "difference": round(total_debit - total_credit, 2),
    }


def is_balanced(total_debit: float, total_credit: float, tolerance: float = 0.01) -> bool:
    return abs(round(total_debit - total_credit, 2)) <= tolerance


def now_str() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def today_str() -> str:
    return datetime.now().strftime("%Y-%m-%d")


def load_json_input() -> Dict[str, Any]:
    """Load JSON object from stdin."""
    try:
        data = json.load(sys.stdin)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON input: {exc}", code="INVALID_JSON") from exc

    if not isinstance(data, dict):
        raise ValidationError("Input must be a JSON object", code="INVALID_JSON")
    return data


def print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def print_error(err: LedgerError) -> None:
    print_json(err.to_dict())


def handle_error(err: LedgerError) -> None:
    print_error(err)
    sys.exit(1)
