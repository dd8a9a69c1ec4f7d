import re
from datetime import date, datetime

from general_ledger.entries import create_entry
from general_ledger.sequences import generate_entry_number, generate_voucher_number, next_sequence
from general_ledger.vouchers import create_voucher

from conftest import entry_header, sale_lines


def test_next_sequence_increments_per_scope(conn):
    assert next_sequence(conn, "a") == 1
    assert next_sequence(conn, "a") == 2
    assert next_sequence(conn, "b") == 1


def test_next_sequence_never_falls_below_floor(conn):
    assert next_sequence(conn, "floored", floor=10) == 11
    assert next_sequence(conn, "floored", floor=10) == 12
    assert next_sequence(conn, "floored", floor=30) == 31


def test_entry_number_format(conn):
    year = datetime.now().year
    assert generate_entry_number(conn) == f"JE-{year}-00001"
    assert generate_entry_number(conn) == f"JE-{year}-00002"
    assert generate_entry_number(conn, "AJ") == f"AJ-{year}-00001"


def test_entry_number_skips_manually_numbered_entries(conn, config):
    year = datetime.now().year
    create_entry(conn, entry_header(entry_number=f"JE-{year}-00041"), sale_lines(), config=config)
    assert generate_entry_number(conn) == f"JE-{year}-00042"


def test_voucher_number_format(conn):
    number = generate_voucher_number(conn, when=date(2026, 3, 9))
    assert number == "CV202603-0001"
    assert generate_voucher_number(conn, when=date(2026, 3, 20)) == "CV202603-0002"
    assert generate_voucher_number(conn, when=date(2026, 4, 1)) == "CV202604-0001"


def test_voucher_number_defaults_to_current_month(conn):
    now = datetime.now()
    number = generate_voucher_number(conn)
    assert re.fullmatch(rf"CV{now.year:04d}{now.month:02d}-\d{{4}}", number)


def test_manual_voucher_number_in_live_scope_is_skipped(conn, config):
    header = {"voucher_type_id": 1, "date": "2026-01-10", "fiscal_period_id": 1}
    first = create_voucher(conn, dict(header), sale_lines(), config=config)
    prefix = first["voucher_number"].rsplit("-", 1)[0]
    create_voucher(conn, dict(header, voucher_number=f"{prefix}-0002"), sale_lines(), config=config)

    third = create_voucher(conn, dict(header), sale_lines(), config=config)
    assert third["voucher_number"] == f"{prefix}-0003"


def test_manual_entry_number_in_live_scope_is_skipped(conn, config):
    year = datetime.now().year
    assert generate_entry_number(conn) == f"JE-{year}-00001"
    create_entry(conn, entry_header(entry_number=f"JE-{year}-00007"), sale_lines(), config=config)
    assert generate_entry_number(conn) == f"JE-{year}-00008"
