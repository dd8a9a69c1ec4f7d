#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Fiscal years and fiscal periods."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from general_ledger.database import atomic
from general_ledger.models import FiscalPeriod
from general_ledger.utils import (
    ClosedPeriodError,
    InvalidPeriodError,
    NotFoundError,
    ValidationError,
    now_str,
)

logger = logging.getLogger(__name__)

PERIOD_OPEN = "open"
PERIOD_CLOSED = "closed"


def _row_to_period(row) -> FiscalPeriod:
    return FiscalPeriod(
        id=row["id"],
        name=row["name"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        status=row["status"],
        is_closed=bool(row["is_closed"]),
        fiscal_year_id=row["fiscal_year_id"],
    )


def create_fiscal_year(conn, year_number: int, name: Optional[str] = None) -> int:
    with atomic(conn):
        cur = conn.execute(
            """
            INSERT INTO fiscal_years (year_number, name, start_date, end_date)
            VALUES (?, ?, ?, ?)
            """,
            (
                year_number,
                name or f"FY{year_number}",
                f"{year_number:04d}-01-01",
                f"{year_number:04d}-12-31",
            ),
        )
    return int(cur.lastrowid)


def create_period(
    conn,
    start_date: str,
    end_date: str,
    name: Optional[str] = None,
    fiscal_year_id: Optional[int] = None,
) -> int:
    if not start_date or not end_date:
        raise ValidationError("Period start_date and end_date are required")
    if end_date < start_date:
        raise ValidationError(
            "Period end_date precedes start_date",
            {"start_date": start_date, "end_date": end_date},
        )
    with atomic(conn):
        cur = conn.execute(
            """
            INSERT INTO fiscal_periods (fiscal_year_id, name, start_date, end_date, status, is_closed)
            VALUES (?, ?, ?, ?, 'open', 0)
            """,
            (fiscal_year_id, name or start_date[:7], start_date, end_date),
        )
    period_id = int(cur.lastrowid)
    logger.info("fiscal period %s created (%s..%s)", period_id, start_date, end_date)
    return period_id


def get_period(conn, period_id: Optional[int]) -> Optional[FiscalPeriod]:
    if period_id is None:
        return None
    row = conn.execute("SELECT * FROM fiscal_periods WHERE id = ?", (period_id,)).fetchone()
    return _row_to_period(row) if row else None


def require_period(conn, period_id: Optional[int]) -> FiscalPeriod:
    period = get_period(conn, period_id)
    if period is None:
        raise InvalidPeriodError(
            f"Fiscal period does not exist: {period_id}", {"fiscal_period_id": period_id}
        )
    return period


def assert_period_open(conn, period_id: Optional[int]) -> FiscalPeriod:
    period = require_period(conn, period_id)
    if period.is_closed or period.status == PERIOD_CLOSED:
        raise ClosedPeriodError(
            f"Fiscal period is closed: {period.name}", {"fiscal_period_id": period.id}
        )
    return period


def find_period_for_date(conn, date_str: str) -> Optional[FiscalPeriod]:
    row = conn.execute(
        """
        SELECT * FROM fiscal_periods
        WHERE start_date <= ? AND end_date >= ?
        ORDER BY start_date DESC
        LIMIT 1
        """,
        (date_str, date_str),
    ).fetchone()
    return _row_to_period(row) if row else None


def list_periods(conn, status: Optional[str] = None) -> List[Dict[str, Any]]:
    if status:
        rows = conn.execute(
            "SELECT * FROM fiscal_periods WHERE status = ? ORDER BY start_date", (status,)
        ).fetchall()
    else:
        rows = conn.execute("SELECT * FROM fiscal_periods ORDER BY start_date").fetchall()
    return [dict(r) for r in rows]


def _set_period_closed(conn, period_id: int, closed: bool, actor_id: Optional[int]) -> Dict[str, Any]:
    period = get_period(conn, period_id)
    if period is None:
        raise NotFoundError(f"Fiscal period not found: {period_id}")
    with atomic(conn):
        if closed:
            conn.execute(
                """
                UPDATE fiscal_periods
                SET status = 'closed', is_closed = 1, closed_at = ?, closed_by = ?
                WHERE id = ?
                """,
                (now_str(), actor_id, period_id),
            )
        else:
            conn.execute(
                """
                UPDATE fiscal_periods
                SET status = 'open', is_closed = 0, closed_at = NULL, closed_by = NULL
                WHERE id = ?
                """,
                (period_id,),
            )
    status = PERIOD_CLOSED if closed else PERIOD_OPEN
    logger.info("fiscal period %s set to %s", period_id, status)
    return {"fiscal_period_id": period_id, "status": status}


def close_period(conn, period_id: int, actor_id: Optional[int] = None) -> Dict[str, Any]:
    return _set_period_closed(conn, period_id, True, actor_id)


def reopen_period(conn, period_id: int) -> Dict[str, Any]:
    return _set_period_closed(conn, period_id, False, None)
