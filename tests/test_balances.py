from general_ledger import balances
from general_ledger.entries import create_entry, post_entry
from general_ledger.models import LedgerLine

from conftest import CASH, EXPENSE, REVENUE, entry_header, sale_lines


def test_apply_accumulates(conn):
    lines = [LedgerLine(account_id=CASH, debit_amount=100), LedgerLine(account_id=REVENUE, credit_amount=100)]
    balances.apply(conn, lines, 1)
    balances.apply(conn, lines, 1)

    cash = balances.get_balance(conn, CASH, 1)
    assert cash.debit_balance == 200
    assert cash.credit_balance == 0
    assert cash.net_balance == 200
    assert balances.get_balance(conn, REVENUE, 1).net_balance == -200


def test_apply_is_keyed_by_period(conn):
    balances.apply(conn, [{"account_id": CASH, "debit_amount": 10, "credit_amount": 0}], 1)
    balances.apply(conn, [{"account_id": CASH, "debit_amount": 20, "credit_amount": 0}], 2)
    assert balances.get_balance(conn, CASH, 1).debit_balance == 10
    assert balances.get_balance(conn, CASH, 2).debit_balance == 20


def test_unapply_may_go_negative(conn):
    balances.unapply(conn, [{"account_id": EXPENSE, "debit_amount": 15, "credit_amount": 0}], 1)
    assert balances.get_balance(conn, EXPENSE, 1).debit_balance == -15


def test_missing_balance_is_zero(conn):
    balance = balances.get_balance(conn, CASH, 2)
    assert balance.debit_balance == 0
    assert balance.credit_balance == 0


def test_rebuild_matches_incremental_projection(conn, config):
    for amount in (100, 250.5):
        entry = create_entry(conn, entry_header(), sale_lines(amount), config=config)
        post_entry(conn, entry["id"], config=config)
    february = create_entry(
        conn, entry_header(date="2026-02-02", fiscal_period_id=2), sale_lines(40, EXPENSE, CASH), config=config
    )
    post_entry(conn, february["id"], config=config)
    create_entry(conn, entry_header(), sale_lines(999), config=config)

    incremental = {
        period: balances.list_balances(conn, period) for period in (1, 2)
    }
    conn.execute("UPDATE account_balances SET debit_balance = 12345")

    balances.rebuild(conn)

    for period in (1, 2):
        assert balances.list_balances(conn, period) == incremental[period]


def test_rebuild_single_period_leaves_others(conn):
    balances.apply(conn, [{"account_id": CASH, "debit_amount": 5, "credit_amount": 0}], 2)
    balances.rebuild(conn, 1)
    assert balances.get_balance(conn, CASH, 2).debit_balance == 5


def test_list_balances_includes_account_details(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(70), config=config)
    post_entry(conn, entry["id"], config=config)

    rows = balances.list_balances(conn, 1)
    assert [row["account_code"] for row in rows] == ["1001", "4001"]
    assert rows[0]["net_balance"] == 70
    assert rows[1]["balance_type"] == "credit"
