import pytest

from general_ledger.entries import create_entry, fetch_entry, post_entry
from general_ledger.lines import create_line, delete_line, fetch_lines, reorder_lines, update_line
from general_ledger.utils import InvalidLineError, InvalidStateError, NotFoundError

from conftest import CASH, EXPENSE, REVENUE, entry_header, sale_lines


def test_create_line_appends_and_recomputes(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(), config=config)

    result = create_line(conn, entry["id"], {"account_id": EXPENSE, "debit_amount": 25})

    assert result["order_number"] == 3
    assert result["total_debit"] == 525
    assert result["total_credit"] == 500
    stored = fetch_entry(conn, entry["id"], with_lines=False)
    assert stored["total_debit"] == 525


def test_create_line_validates(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(), config=config)
    with pytest.raises(InvalidLineError):
        create_line(conn, entry["id"], {"account_id": EXPENSE, "debit_amount": 1, "credit_amount": 1})
    assert len(fetch_lines(conn, entry["id"])) == 2


def test_create_line_on_missing_entry(conn):
    with pytest.raises(NotFoundError):
        create_line(conn, 404, {"account_id": CASH, "debit_amount": 1})


def test_update_line_recomputes_totals(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(), config=config)
    line_id = fetch_lines(conn, entry["id"])[1]["id"]

    result = update_line(conn, line_id, {"account_id": REVENUE, "credit_amount": 450})

    assert result["total_credit"] == 450
    assert fetch_lines(conn, entry["id"])[1]["order_number"] == 2


def test_delete_line_keeps_numbering_dense(conn, config):
    lines = sale_lines() + [{"account_id": EXPENSE, "debit_amount": 10}]
    entry = create_entry(conn, entry_header(), lines, config=config)
    first_id = fetch_lines(conn, entry["id"])[0]["id"]

    result = delete_line(conn, first_id)

    assert result["deleted"] is True
    remaining = fetch_lines(conn, entry["id"])
    assert [line["order_number"] for line in remaining] == [1, 2]
    assert [line["account_id"] for line in remaining] == [REVENUE, EXPENSE]
    assert result["total_debit"] == 10
    assert result["total_credit"] == 500


def test_reorder_lines_closes_gaps(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(), config=config)
    conn.execute(
        "UPDATE journal_entry_lines SET order_number = order_number * 10 WHERE journal_entry_id = ?",
        (entry["id"],),
    )
    assert reorder_lines(conn, entry["id"]) == 2
    assert [line["order_number"] for line in fetch_lines(conn, entry["id"])] == [1, 2]


def test_lines_frozen_after_posting(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(), config=config)
    post_entry(conn, entry["id"], config=config)
    line_id = fetch_lines(conn, entry["id"])[0]["id"]

    with pytest.raises(InvalidStateError):
        create_line(conn, entry["id"], {"account_id": CASH, "debit_amount": 1})
    with pytest.raises(InvalidStateError):
        update_line(conn, line_id, {"account_id": CASH, "debit_amount": 1})
    with pytest.raises(InvalidStateError):
        delete_line(conn, line_id)
    assert len(fetch_lines(conn, entry["id"])) == 2


def test_missing_line(conn):
    with pytest.raises(NotFoundError):
        delete_line(conn, 777)
