from openpyxl import load_workbook

from general_ledger.entries import create_entry, post_entry
from general_ledger.exports import export_balances, export_journal_book, export_vouchers
from general_ledger.vouchers import create_voucher

from conftest import entry_header, sale_lines


def test_export_journal_book(conn, config, tmp_path):
    entry = create_entry(conn, entry_header(), sale_lines(120), config=config)
    post_entry(conn, entry["id"], config=config)
    create_entry(conn, entry_header(date="2026-01-20"), sale_lines(30), config=config)

    result = export_journal_book(conn, str(tmp_path / "out" / "journal.xlsx"), fiscal_period_id=1)

    assert result["rows"] == 7
    ws = load_workbook(result["path"])["Journal"]
    assert ws["A1"].value == "Entry"
    assert ws["A2"].value == entry["entry_number"]
    assert ws["D3"].value == "1001"
    assert ws["G3"].value == 120
    assert ws["A8"].value == "Total"
    assert ws["G8"].value == 150


def test_export_journal_book_filters(conn, config, tmp_path):
    entry = create_entry(conn, entry_header(), sale_lines(120), config=config)
    post_entry(conn, entry["id"], config=config)
    create_entry(conn, entry_header(), sale_lines(30), config=config)

    result = export_journal_book(conn, str(tmp_path / "posted.xlsx"), status="posted")
    assert result["rows"] == 4


def test_export_vouchers(conn, config, tmp_path):
    voucher = create_voucher(
        conn,
        {"voucher_type_id": 1, "date": "2026-01-10", "fiscal_period_id": 1},
        sale_lines(60),
        config=config,
    )
    result = export_vouchers(conn, str(tmp_path / "vouchers.xlsx"))

    assert result["rows"] == 3
    ws = load_workbook(result["path"])["Vouchers"]
    assert ws["A2"].value == voucher["voucher_number"]
    assert ws["D2"].value == "DRAFT"


def test_export_balances(conn, config, tmp_path):
    entry = create_entry(conn, entry_header(), sale_lines(120), config=config)
    post_entry(conn, entry["id"], config=config)

    result = export_balances(conn, str(tmp_path / "balances.xlsx"), 1)

    ws = load_workbook(result["path"])["Balances"]
    assert [ws.cell(row=r, column=1).value for r in range(2, 5)] == ["1001", "4001", "Total"]
    assert ws["D4"].value == 120
    assert ws["E4"].value == 120
    assert ws["F4"].value == 0
