import pytest

from general_ledger.lines import validate_line
from general_ledger.models import LedgerEntry, LedgerLine, Voucher, VoucherLine
from general_ledger.utils import InvalidLineError, ValidationError


def test_line_with_debit_only_is_valid():
    line = validate_line({"account_id": 1, "debit_amount": 100})
    assert line.debit_amount == 100
    assert line.credit_amount == 0


def test_line_accepts_short_amount_keys():
    line = LedgerLine.from_dict({"account_id": 1, "credit": "25.5"})
    assert line.credit_amount == 25.5
    assert line.debit_amount == 0


@pytest.mark.parametrize(
    "payload",
    [
        {"account_id": 1, "debit_amount": 10, "credit_amount": 10},
        {"account_id": 1, "debit_amount": 0, "credit_amount": 0},
        {"account_id": 1},
        {"account_id": 1, "debit_amount": -5},
        {"debit_amount": 5},
    ],
)
def test_invalid_lines_rejected(payload):
    with pytest.raises(InvalidLineError) as exc:
        validate_line(payload)
    assert exc.value.code == "INVALID_LINE"


def test_invalid_line_is_a_validation_error():
    with pytest.raises(ValidationError):
        validate_line({"account_id": 1, "debit_amount": 1, "credit_amount": 1})


def test_non_numeric_amount_rejected():
    with pytest.raises(ValidationError):
        validate_line({"account_id": 1, "debit_amount": "abc"})


def test_swapped_line():
    line = LedgerLine(account_id=7, debit_amount=40, description="fee")
    swapped = line.swapped()
    assert swapped.debit_amount == 0
    assert swapped.credit_amount == 40
    assert swapped.account_id == 7


def test_entry_totals_and_tolerance():
    entry = LedgerEntry(
        lines=[
            LedgerLine(account_id=1, debit_amount=100),
            LedgerLine(account_id=2, credit_amount=99.99),
        ]
    )
    entry.recompute_totals()
    assert entry.total_debit == 100
    assert entry.total_credit == 99.99
    assert entry.is_balanced()

    entry.lines[1].credit_amount = 99.98
    entry.recompute_totals()
    assert not entry.is_balanced()


def test_voucher_is_balanced():
    voucher = Voucher(
        lines=[
            VoucherLine(account_id=1, debit_amount=1000),
            VoucherLine(account_id=2, credit_amount=1000),
        ]
    )
    assert voucher.is_balanced()


def test_voucher_not_balanced():
    voucher = Voucher(
        lines=[
            VoucherLine(account_id=1, debit_amount=300),
            VoucherLine(account_id=2, credit_amount=250),
        ]
    )
    assert not voucher.is_balanced()
    assert voucher.total_debit == 300
    assert voucher.total_credit == 250
