#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Accounting vouchers: DRAFT -> VALIDATED -> APPROVED -> CANCELLED.

Approval turns a voucher into exactly one posted ledger entry; cancelling
an approved voucher reverses that entry.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from general_ledger.bank import BankSideEffectNotifier
from general_ledger.config import load_config
from general_ledger.database import atomic
from general_ledger.entries import create_entry, post_entry, reverse_entry
from general_ledger.lines import validate_line
from general_ledger.models import Voucher, VoucherLine
from general_ledger.models.entry import SOURCE_VOUCHER
from general_ledger.models.voucher import (
    APPROVABLE_STATUSES,
    VOUCHER_APPROVED,
    VOUCHER_CANCELLED,
    VOUCHER_DRAFT,
    VOUCHER_STATUSES,
    VOUCHER_VALIDATED,
)
from general_ledger.periods import assert_period_open
from general_ledger.sequences import generate_voucher_number
from general_ledger.utils import (
    InvalidStateError,
    NotFoundError,
    UnbalancedVoucherError,
    ValidationError,
    balance_details,
    is_balanced,
    now_str,
)

logger = logging.getLogger(__name__)

REQUIRED_HEADER_FIELDS = ("voucher_type_id", "date", "fiscal_period_id")


def _settings(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return config if config is not None else load_config()


def _parse_lines(lines: Any) -> List[VoucherLine]:
    if not isinstance(lines, list) or not lines:
        raise ValidationError("A voucher requires at least one line")
    parsed = []
    for index, raw in enumerate(lines, start=1):
        try:
            line = validate_line(raw)
        except ValidationError as exc:
            details = dict(exc.details or {})
            details["line"] = index
            exc.details = details
            raise
        parsed.append(
            VoucherLine(
                account_id=line.account_id,
                debit_amount=line.debit_amount,
                credit_amount=line.credit_amount,
                description=line.description or None,
                third_party_id=line.third_party_id,
                reference=raw.get("reference") if isinstance(raw, dict) else None,
            )
        )
    return parsed


def _check_balanced(lines: List[VoucherLine], tolerance: float) -> Tuple[float, float]:
    voucher = Voucher(lines=lines)
    if not voucher.is_balanced(tolerance):
        raise UnbalancedVoucherError(
            "Voucher is not balanced: total debit must equal total credit",
            balance_details(voucher.total_debit, voucher.total_credit),
        )
    return voucher.total_debit, voucher.total_credit


def _insert_lines(conn, voucher_id: int, lines: List[VoucherLine]) -> None:
    for index, line in enumerate(lines, start=1):
        conn.execute(
            """
            INSERT INTO voucher_lines (
              voucher_id, line_number, account_id, third_party_id, description,
              debit_amount, credit_amount, reference
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                voucher_id,
                index,
                line.account_id,
                line.third_party_id,
                line.description,
                line.debit_amount,
                line.credit_amount,
                line.reference,
            ),
        )


def _record_history(
    conn,
    voucher_id: int,
    previous_status: Optional[str],
    new_status: str,
    actor_id: Optional[int],
    comments: Optional[str] = None,
) -> None:
    conn.execute(
        """
        INSERT INTO voucher_status_history (voucher_id, previous_status, new_status, actor_id, comments, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (voucher_id, previous_status, new_status, actor_id, comments, now_str()),
    )


def _get_voucher_row(conn, voucher_id: int) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM accounting_vouchers WHERE id = ?", (voucher_id,)
    ).fetchone()
    if not row:
        raise NotFoundError(f"Voucher not found: {voucher_id}", code="VOUCHER_NOT_FOUND")
    return dict(row)


def fetch_voucher_lines(conn, voucher_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT vl.*, a.code AS account_code, a.name AS account_name
        FROM voucher_lines vl
        LEFT JOIN accounts a ON a.id = vl.account_id
        WHERE vl.voucher_id = ?
        ORDER BY vl.line_number
        """,
        (voucher_id,),
    ).fetchall()
    return [dict(r) for r in rows]


def _set_status(
    conn,
    voucher: Dict[str, Any],
    new_status: str,
    actor_id: Optional[int],
    comments: Optional[str] = None,
) -> None:
    conn.execute(
        "UPDATE accounting_vouchers SET status = ?, updated_by = ?, updated_at = ? WHERE id = ?",
        (new_status, actor_id, now_str(), voucher["id"]),
    )
    _record_history(conn, voucher["id"], voucher["status"], new_status, actor_id, comments)


def create_voucher(
    conn,
    header: Dict[str, Any],
    lines: List[Any],
    actor_id: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    settings = _settings(config)
    if not isinstance(header, dict):
        raise ValidationError("Voucher header must be an object")
    missing = [field for field in REQUIRED_HEADER_FIELDS if not header.get(field)]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}", {"missing": missing}
        )
    parsed = _parse_lines(lines)
    total_debit, total_credit = _check_balanced(parsed, settings["balance_tolerance"])

    with atomic(conn):
        assert_period_open(conn, header["fiscal_period_id"])
        voucher_number = header.get("voucher_number") or generate_voucher_number(
            conn, prefix=settings["voucher_prefix"]
        )
        cur = conn.execute(
            """
            INSERT INTO accounting_vouchers (
              voucher_number, voucher_type_id, date, description, reference,
              third_party_id, fiscal_period_id, currency_id, exchange_rate,
              total_debit, total_credit, total_amount, status, created_by
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                voucher_number,
                header["voucher_type_id"],
                header["date"],
                header.get("description"),
                header.get("reference"),
                header.get("third_party_id"),
                header["fiscal_period_id"],
                header.get("currency_id"),
                float(header.get("exchange_rate") or 1),
                total_debit,
                total_credit,
                total_debit,
                VOUCHER_DRAFT,
                actor_id,
            ),
        )
        voucher_id = int(cur.lastrowid)
        _insert_lines(conn, voucher_id, parsed)
        _record_history(conn, voucher_id, None, VOUCHER_DRAFT, actor_id, "created")

    logger.info("voucher %s created", voucher_number)
    return {
        "id": voucher_id,
        "voucher_number": voucher_number,
        "status": VOUCHER_DRAFT,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "total_amount": total_debit,
    }


def update_voucher(
    conn,
    voucher_id: int,
    header: Dict[str, Any],
    lines: Optional[List[Any]] = None,
    actor_id: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    settings = _settings(config)
    if not isinstance(header, dict):
        raise ValidationError("Voucher header must be an object")

    with atomic(conn):
        voucher = _get_voucher_row(conn, voucher_id)
        if voucher["status"] != VOUCHER_DRAFT:
            raise InvalidStateError(
                f"Only DRAFT vouchers can be updated (status: {voucher['status']})",
                {"voucher_id": voucher_id, "status": voucher["status"]},
            )
        if voucher["journal_entry_id"]:
            raise InvalidStateError(
                "Voucher already has a journal entry", {"voucher_id": voucher_id}
            )
        merged = dict(voucher)
        for field in (
            "voucher_type_id",
            "date",
            "description",
            "reference",
            "third_party_id",
            "fiscal_period_id",
            "currency_id",
            "exchange_rate",
        ):
            if field in header:
                merged[field] = header[field]
        missing = [field for field in REQUIRED_HEADER_FIELDS if not merged.get(field)]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}", {"missing": missing}
            )
        total_debit, total_credit = voucher["total_debit"], voucher["total_credit"]
        parsed = None
        if lines is not None:
            parsed = _parse_lines(lines)
            total_debit, total_credit = _check_balanced(parsed, settings["balance_tolerance"])
        assert_period_open(conn, merged["fiscal_period_id"])

        conn.execute(
            """
            UPDATE accounting_vouchers
            SET voucher_type_id = ?, date = ?, description = ?, reference = ?,
                third_party_id = ?, fiscal_period_id = ?, currency_id = ?,
                exchange_rate = ?, total_debit = ?, total_credit = ?, total_amount = ?,
                updated_by = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                merged["voucher_type_id"],
                merged["date"],
                merged.get("description"),
                merged.get("reference"),
                merged.get("third_party_id"),
                merged["fiscal_period_id"],
                merged.get("currency_id"),
                float(merged.get("exchange_rate") or 1),
                total_debit,
                total_credit,
                total_debit,
                actor_id,
                now_str(),
                voucher_id,
            ),
        )
        if parsed is not None:
            conn.execute("DELETE FROM voucher_lines WHERE voucher_id = ?", (voucher_id,))
            _insert_lines(conn, voucher_id, parsed)

    logger.info("voucher %s updated", voucher["voucher_number"])
    return {
        "id": voucher_id,
        "voucher_number": voucher["voucher_number"],
        "status": VOUCHER_DRAFT,
        "total_debit": total_debit,
        "total_credit": total_credit,
    }


def _revalidate(conn, voucher: Dict[str, Any], tolerance: float) -> List[Dict[str, Any]]:
    lines = fetch_voucher_lines(conn, voucher["id"])
    if not lines:
        raise ValidationError(
            "Voucher has no lines", {"voucher_id": voucher["id"]}
        )
    for line in lines:
        validate_line(line)
    total_debit = round(sum(line["debit_amount"] for line in lines), 2)
    total_credit = round(sum(line["credit_amount"] for line in lines), 2)
    if not is_balanced(total_debit, total_credit, tolerance):
        raise UnbalancedVoucherError(
            "Voucher is not balanced: total debit must equal total credit",
            balance_details(total_debit, total_credit),
        )
    return lines


def validate_voucher(
    conn, voucher_id: int, actor_id: Optional[int] = None, config: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    settings = _settings(config)
    with atomic(conn):
        voucher = _get_voucher_row(conn, voucher_id)
        if voucher["status"] != VOUCHER_DRAFT:
            raise InvalidStateError(
                f"Only DRAFT vouchers can be validated (status: {voucher['status']})",
                {"voucher_id": voucher_id, "status": voucher["status"]},
            )
        _revalidate(conn, voucher, settings["balance_tolerance"])
        _set_status(conn, voucher, VOUCHER_VALIDATED, actor_id)
        conn.execute(
            "UPDATE accounting_vouchers SET validated_at = ? WHERE id = ?",
            (now_str(), voucher_id),
        )
    logger.info("voucher %s validated", voucher["voucher_number"])
    return {"voucher_id": voucher_id, "status": VOUCHER_VALIDATED}


def unvalidate_voucher(conn, voucher_id: int, actor_id: Optional[int] = None) -> Dict[str, Any]:
    with atomic(conn):
        voucher = _get_voucher_row(conn, voucher_id)
        if voucher["status"] != VOUCHER_VALIDATED:
            raise InvalidStateError(
                f"Only VALIDATED vouchers can be returned to DRAFT (status: {voucher['status']})",
                {"voucher_id": voucher_id, "status": voucher["status"]},
            )
        _set_status(conn, voucher, VOUCHER_DRAFT, actor_id)
        conn.execute(
            "UPDATE accounting_vouchers SET validated_at = NULL WHERE id = ?", (voucher_id,)
        )
    logger.info("voucher %s returned to draft", voucher["voucher_number"])
    return {"voucher_id": voucher_id, "status": VOUCHER_DRAFT}


def approve_voucher(
    conn,
    voucher_id: int,
    actor_id: Optional[int] = None,
    notifier: Optional[BankSideEffectNotifier] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Generate and post the voucher's ledger entry. Exactly once per voucher."""
    settings = _settings(config)
    with atomic(conn):
        voucher = _get_voucher_row(conn, voucher_id)
        if voucher["status"] not in APPROVABLE_STATUSES:
            raise InvalidStateError(
                f"Voucher cannot be approved from status {voucher['status']}",
                {"voucher_id": voucher_id, "status": voucher["status"]},
            )
        if voucher["journal_entry_id"]:
            raise InvalidStateError(
                "Voucher already has a journal entry",
                {"voucher_id": voucher_id, "journal_entry_id": voucher["journal_entry_id"]},
            )
        lines = _revalidate(conn, voucher, settings["balance_tolerance"])
        assert_period_open(conn, voucher["fiscal_period_id"])

        entry = create_entry(
            conn,
            {
                "entry_type": settings["voucher_entry_type"],
                "date": voucher["date"],
                "fiscal_period_id": voucher["fiscal_period_id"],
                "reference": voucher["reference"] or voucher["voucher_number"],
                "description": f"Entry generated from voucher {voucher['voucher_number']}",
                "third_party_id": voucher["third_party_id"],
                "source_document_type": SOURCE_VOUCHER,
                "source_document_id": voucher_id,
            },
            [
                {
                    "account_id": line["account_id"],
                    "third_party_id": line["third_party_id"],
                    "description": line["description"] or "",
                    "debit_amount": line["debit_amount"],
                    "credit_amount": line["credit_amount"],
                }
                for line in lines
            ],
            actor_id=actor_id,
            config=settings,
        )
        post_entry(conn, entry["id"], actor_id=actor_id, notifier=notifier, config=settings)

        approved_at = now_str()
        cur = conn.execute(
            f"""
            UPDATE accounting_vouchers
            SET status = ?, journal_entry_id = ?, approved_by = ?, approved_at = ?,
                updated_by = ?, updated_at = ?
            WHERE id = ? AND journal_entry_id IS NULL
              AND status IN ({', '.join('?' for _ in APPROVABLE_STATUSES)})
            """,
            (
                VOUCHER_APPROVED,
                entry["id"],
                actor_id,
                approved_at,
                actor_id,
                approved_at,
                voucher_id,
                *APPROVABLE_STATUSES,
            ),
        )
        if cur.rowcount != 1:
            raise InvalidStateError(
                "Voucher changed state concurrently", {"voucher_id": voucher_id}
            )
        _record_history(
            conn,
            voucher_id,
            voucher["status"],
            VOUCHER_APPROVED,
            actor_id,
            f"journal entry {entry['entry_number']}",
        )

    logger.info("voucher %s approved as entry %s", voucher["voucher_number"], entry["entry_number"])
    return {
        "voucher_id": voucher_id,
        "journal_entry_id": entry["id"],
        "journal_entry_number": entry["entry_number"],
        "status": VOUCHER_APPROVED,
    }


def cancel_voucher(
    conn,
    voucher_id: int,
    reason: str,
    actor_id: Optional[int] = None,
    notifier: Optional[BankSideEffectNotifier] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Cancel a voucher, reversing its ledger entry when it was approved."""
    settings = _settings(config)
    if not reason or not str(reason).strip():
        raise ValidationError("A cancellation reason is required")
    reason = str(reason).strip()

    with atomic(conn):
        voucher = _get_voucher_row(conn, voucher_id)
        if voucher["status"] == VOUCHER_CANCELLED:
            raise InvalidStateError(
                "Voucher is already cancelled", {"voucher_id": voucher_id}
            )
        reversal_id = None
        if voucher["status"] == VOUCHER_APPROVED and voucher["journal_entry_id"]:
            reversal = reverse_entry(
                conn,
                voucher["journal_entry_id"],
                actor_id=actor_id,
                reason=f"Voucher {voucher['voucher_number']} cancelled: {reason}",
                notifier=notifier,
                config=settings,
            )
            reversal_id = reversal["reversal_id"]

        cancelled_at = now_str()
        conn.execute(
            """
            UPDATE accounting_vouchers
            SET status = ?, cancellation_reason = ?, cancelled_at = ?, cancelled_by = ?,
                reversal_journal_entry_id = ?, updated_by = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                VOUCHER_CANCELLED,
                reason,
                cancelled_at,
                actor_id,
                reversal_id,
                actor_id,
                cancelled_at,
                voucher_id,
            ),
        )
        _record_history(conn, voucher_id, voucher["status"], VOUCHER_CANCELLED, actor_id, reason)

    logger.info("voucher %s cancelled", voucher["voucher_number"])
    return {
        "voucher_id": voucher_id,
        "status": VOUCHER_CANCELLED,
        "reversal_journal_entry_id": reversal_id,
        "reason": reason,
    }


def delete_voucher(conn, voucher_id: int) -> Dict[str, Any]:
    with atomic(conn):
        voucher = _get_voucher_row(conn, voucher_id)
        if voucher["status"] != VOUCHER_DRAFT:
            raise InvalidStateError(
                f"Only DRAFT vouchers can be deleted (status: {voucher['status']})",
                {"voucher_id": voucher_id, "status": voucher["status"]},
            )
        conn.execute("DELETE FROM voucher_lines WHERE voucher_id = ?", (voucher_id,))
        conn.execute("DELETE FROM voucher_status_history WHERE voucher_id = ?", (voucher_id,))
        conn.execute("DELETE FROM accounting_vouchers WHERE id = ?", (voucher_id,))
    logger.info("voucher %s deleted", voucher["voucher_number"])
    return {"voucher_id": voucher_id, "voucher_number": voucher["voucher_number"], "deleted": True}


def fetch_voucher(conn, voucher_id: int, with_lines: bool = True) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        """
        SELECT av.*, vt.code AS voucher_type_code, vt.name AS voucher_type_name,
               je.entry_number AS journal_entry_number, je.status AS journal_entry_status
        FROM accounting_vouchers av
        LEFT JOIN voucher_types vt ON vt.id = av.voucher_type_id
        LEFT JOIN journal_entries je ON je.id = av.journal_entry_id
        WHERE av.id = ?
        """,
        (voucher_id,),
    ).fetchone()
    if not row:
        return None
    voucher = dict(row)
    if with_lines:
        voucher["lines"] = fetch_voucher_lines(conn, voucher_id)
    return voucher


def find_voucher_by_number(conn, voucher_number: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT id FROM accounting_vouchers WHERE voucher_number = ?", (voucher_number,)
    ).fetchone()
    return fetch_voucher(conn, row["id"]) if row else None


def _filters(
    voucher_number: Optional[str],
    voucher_type_id: Optional[int],
    status: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str],
) -> Tuple[str, List[Any]]:
    conditions = ["1=1"]
    params: List[Any] = []
    if voucher_number:
        conditions.append("av.voucher_number LIKE ?")
        params.append(f"%{voucher_number}%")
    if voucher_type_id:
        conditions.append("av.voucher_type_id = ?")
        params.append(voucher_type_id)
    if status:
        if status not in VOUCHER_STATUSES:
            raise ValidationError(f"Invalid voucher status: {status}")
        conditions.append("av.status = ?")
        params.append(status)
    if start_date:
        conditions.append("av.date >= ?")
        params.append(start_date)
    if end_date:
        conditions.append("av.date <= ?")
        params.append(end_date)
    return " AND ".join(conditions), params


def list_vouchers(
    conn,
    voucher_number: Optional[str] = None,
    voucher_type_id: Optional[int] = None,
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    where, params = _filters(voucher_number, voucher_type_id, status, start_date, end_date)
    sql = f"""
        SELECT av.*, vt.name AS voucher_type_name
        FROM accounting_vouchers av
        LEFT JOIN voucher_types vt ON vt.id = av.voucher_type_id
        WHERE {where}
        ORDER BY av.date DESC, av.voucher_number DESC
    """
    if page and limit:
        sql += " LIMIT ? OFFSET ?"
        params.extend([int(limit), (int(page) - 1) * int(limit)])
    elif limit:
        sql += " LIMIT ?"
        params.append(int(limit))
    return [dict(r) for r in conn.execute(sql, params).fetchall()]


def count_vouchers(
    conn,
    voucher_number: Optional[str] = None,
    voucher_type_id: Optional[int] = None,
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> int:
    where, params = _filters(voucher_number, voucher_type_id, status, start_date, end_date)
    row = conn.execute(
        f"SELECT COUNT(*) AS total FROM accounting_vouchers av WHERE {where}", params
    ).fetchone()
    return int(row["total"])


def get_status_history(conn, voucher_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT * FROM voucher_status_history
        WHERE voucher_id = ?
        ORDER BY id
        """,
        (voucher_id,),
    ).fetchall()
    return [dict(r) for r in rows]
