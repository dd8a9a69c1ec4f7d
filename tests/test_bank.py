import logging

import pytest

from general_ledger.bank import (
    BankSideEffectNotifier,
    NullBankNotifier,
    SqliteBankNotifier,
    add_bank_account,
    get_bank_account,
    list_bank_transactions,
)
from general_ledger.entries import (
    affects_bank_accounts,
    create_entry,
    fetch_entry,
    get_bank_transactions,
    post_entry,
    reverse_entry,
    validate_bank_sync,
)
from general_ledger.utils import UnbalancedEntryError

from conftest import BANK, CASH, EXPENSE, REVENUE, entry_header, sale_lines


class RecordingNotifier(BankSideEffectNotifier):
    def __init__(self):
        self.calls = []

    def has_bank_account_lines(self, conn, lines):
        self.calls.append("has")
        return True

    def process_for_bank_transactions(self, conn, entry_id, lines):
        self.calls.append(("process", entry_id))
        return []

    def void_bank_transactions_by_entry(self, conn, entry_id, actor_id, reason):
        self.calls.append(("void", entry_id, reason))
        return []


class ExplodingNotifier(BankSideEffectNotifier):
    def __init__(self, failures=None):
        self.failures = failures
        self.attempts = 0

    def has_bank_account_lines(self, conn, lines):
        return True

    def process_for_bank_transactions(self, conn, entry_id, lines):
        self.attempts += 1
        if self.failures is None or self.attempts <= self.failures:
            raise TimeoutError("bank service timed out")
        return []

    def void_bank_transactions_by_entry(self, conn, entry_id, actor_id, reason):
        raise ConnectionError("bank service down")


def _bank_account(conn):
    return conn.execute("SELECT * FROM bank_accounts WHERE gl_account_id = ?", (BANK,)).fetchone()


def test_bank_account_created_for_bank_gl_account(conn):
    bank = _bank_account(conn)
    assert bank["account_number"] == "1002"
    assert bank["current_balance"] == 0


def test_has_bank_account_lines(conn):
    notifier = SqliteBankNotifier()
    assert notifier.has_bank_account_lines(conn, sale_lines(1, BANK, REVENUE))
    assert not notifier.has_bank_account_lines(conn, sale_lines(1, CASH, REVENUE))


def test_post_records_deposit_after_commit(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(300, BANK, REVENUE), config=config)
    post_entry(conn, entry["id"], config=config)
    assert get_bank_transactions(conn, entry["id"]) == []

    conn.commit()

    transactions = get_bank_transactions(conn, entry["id"])
    assert len(transactions) == 1
    tx = transactions[0]
    assert tx["transaction_type"] == "deposit"
    assert tx["amount"] == 300
    assert tx["status"] == "cleared"
    assert tx["reference_number"] == entry["entry_number"]
    assert tx["document_type"] == "journal_entry"
    assert tx["running_balance"] == 300
    assert _bank_account(conn)["current_balance"] == 300
    assert validate_bank_sync(conn, entry["id"])["is_synchronized"] is True


def test_credit_line_is_withdrawal(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(80, EXPENSE, BANK), config=config)
    post_entry(conn, entry["id"], config=config)
    conn.commit()

    tx = get_bank_transactions(conn, entry["id"])[0]
    assert tx["transaction_type"] == "withdrawal"
    assert _bank_account(conn)["current_balance"] == -80


def test_reverse_voids_bank_transactions(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(300, BANK, REVENUE), config=config)
    post_entry(conn, entry["id"], config=config)
    conn.commit()

    reverse_entry(conn, entry["id"], actor_id=4, reason="bounced", config=config)
    conn.commit()

    assert SqliteBankNotifier().list_by_entry(conn, entry["id"]) == list_bank_transactions(conn, entry["id"])
    tx = list_bank_transactions(conn, entry["id"])[0]
    assert tx["status"] == "voided"
    assert tx["voided_by"] == 4
    assert tx["void_reason"] == "Entry reversed: bounced"
    assert _bank_account(conn)["current_balance"] == 0


def test_notifier_failure_does_not_undo_post(conn, config, caplog):
    entry = create_entry(conn, entry_header(), sale_lines(300, BANK, REVENUE), config=config)
    notifier = ExplodingNotifier()

    post_entry(conn, entry["id"], notifier=notifier, config=config)
    with caplog.at_level(logging.WARNING):
        conn.commit()

    assert fetch_entry(conn, entry["id"])["status"] == "posted"
    assert any(f"bank:post:{entry['id']}" in r.getMessage() for r in caplog.records)


def test_notifier_failure_does_not_undo_reverse(conn, config):
    entry = create_entry(conn, entry_header(), sale_lines(300, BANK, REVENUE), config=config)
    post_entry(conn, entry["id"], config=config)
    reverse_entry(conn, entry["id"], notifier=ExplodingNotifier(), config=config)
    conn.commit()

    assert fetch_entry(conn, entry["id"])["status"] == "reversed"


def test_notifier_retries_up_to_max_attempts(conn, config):
    config["bank_notifier"]["max_attempts"] = 3
    notifier = ExplodingNotifier(failures=2)
    entry = create_entry(conn, entry_header(), sale_lines(300, BANK, REVENUE), config=config)

    post_entry(conn, entry["id"], notifier=notifier, config=config)
    conn.commit()

    assert notifier.attempts == 3


def test_notifier_not_called_when_post_fails(conn, config):
    notifier = RecordingNotifier()
    lines = [{"account_id": BANK, "debit_amount": 10}, {"account_id": REVENUE, "credit_amount": 9}]
    entry = create_entry(conn, entry_header(), lines, config=config)

    with pytest.raises(UnbalancedEntryError):
        post_entry(conn, entry["id"], notifier=notifier, config=config)
    conn.commit()

    assert notifier.calls == []


def test_notifier_receives_post_and_reverse(conn, config):
    notifier = RecordingNotifier()
    entry = create_entry(conn, entry_header(), sale_lines(), config=config)
    post_entry(conn, entry["id"], notifier=notifier, config=config)
    reverse_entry(conn, entry["id"], reason="dup", notifier=notifier, config=config)
    conn.commit()

    assert notifier.calls == [
        "has",
        ("process", entry["id"]),
        ("void", entry["id"], "Entry reversed: dup"),
    ]


def test_disabled_notifier_records_nothing(conn, config):
    config["bank_notifier"]["enabled"] = False
    entry = create_entry(conn, entry_header(), sale_lines(300, BANK, REVENUE), config=config)
    post_entry(conn, entry["id"], config=config)
    conn.commit()

    assert get_bank_transactions(conn, entry["id"]) == []
    sync = validate_bank_sync(conn, entry["id"])
    assert sync["expected_transactions"] == 1
    assert sync["actual_transactions"] == 0
    assert sync["is_synchronized"] is False
    assert sync["discrepancies"][0]["type"] == "count_mismatch"


def test_null_notifier():
    notifier = NullBankNotifier()
    assert notifier.has_bank_account_lines(None, []) is False
    assert notifier.process_for_bank_transactions(None, 1, []) == []
    assert notifier.void_bank_transactions_by_entry(None, 1, None, "") == []


def test_affects_bank_accounts(conn, config):
    bank_entry = create_entry(conn, entry_header(), sale_lines(1, BANK, REVENUE), config=config)
    cash_entry = create_entry(conn, entry_header(), sale_lines(1), config=config)
    assert affects_bank_accounts(conn, bank_entry["id"])
    assert not affects_bank_accounts(conn, cash_entry["id"])


def test_add_bank_account_with_opening_balance(conn):
    bank_id = add_bank_account(conn, "ES-001", "Savings", CASH, bank_name="Local", opening_balance=50)
    account = get_bank_account(conn, bank_id)
    assert account["current_balance"] == 50
    assert SqliteBankNotifier().has_bank_account_lines(conn, sale_lines(1))


class StaleSnapshotNotifier(SqliteBankNotifier):
    """Sees every bank account with the balance it had when first read."""

    def __init__(self, snapshot):
        self.snapshot = snapshot

    def _bank_accounts_by_gl(self, conn):
        return {gl: dict(bank) for gl, bank in self.snapshot.items()}


def test_bank_balance_increments_from_current_row(conn, config):
    snapshot = SqliteBankNotifier()._bank_accounts_by_gl(conn)
    first = create_entry(conn, entry_header(), sale_lines(1000, BANK, REVENUE), config=config)
    post_entry(conn, first["id"], config=config)
    conn.commit()
    assert _bank_account(conn)["current_balance"] == 1000

    notifier = StaleSnapshotNotifier(snapshot)
    second = create_entry(conn, entry_header(), sale_lines(300, BANK, REVENUE), config=config)
    post_entry(conn, second["id"], notifier=notifier, config=config)
    conn.commit()

    assert _bank_account(conn)["current_balance"] == 1300
    assert get_bank_transactions(conn, second["id"])[0]["running_balance"] == 1300
