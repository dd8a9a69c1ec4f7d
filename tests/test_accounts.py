import pytest

from general_ledger.accounts import (
    create_third_party,
    find_account,
    get_account,
    list_accounts,
    load_accounts,
)
from general_ledger.entries import create_entry, fetch_entry
from general_ledger.utils import NotFoundError, ValidationError

from conftest import BANK, CASH, entry_header, sale_lines


def test_get_account(conn):
    account = get_account(conn, CASH)
    assert account["code"] == "1001"
    assert account["balance_type"] == "debit"
    assert get_account(conn, 9999) is None


def test_find_account_by_code_or_id(conn):
    assert find_account(conn, "1002")["id"] == BANK
    assert find_account(conn, BANK)["code"] == "1002"
    with pytest.raises(NotFoundError) as exc:
        find_account(conn, "9999")
    assert exc.value.code == "ACCOUNT_NOT_FOUND"


def test_load_accounts_upserts_by_code(conn):
    load_accounts(conn, [{"code": "1001", "name": "Petty cash", "balance_type": "debit"}])
    assert get_account(conn, CASH)["name"] == "Petty cash"
    assert len(list_accounts(conn)) == 4


def test_load_accounts_rejects_bad_balance_type(conn):
    with pytest.raises(ValidationError):
        load_accounts(conn, [{"code": "9001", "name": "Odd", "balance_type": "sideways"}])
    with pytest.raises(ValidationError):
        load_accounts(conn, [{"code": "9002"}])


def test_third_party_inherited_by_lines(conn, config):
    party_id = create_third_party(conn, "C001", "Acme Ltd")
    entry = create_entry(conn, entry_header(third_party_id=party_id), sale_lines(), config=config)
    fetched = fetch_entry(conn, entry["id"])
    assert fetched["third_party_id"] == party_id
    assert [line["third_party_id"] for line in fetched["lines"]] == [party_id, party_id]
