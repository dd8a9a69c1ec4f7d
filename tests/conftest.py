import copy

import pytest

from general_ledger.accounts import load_accounts
from general_ledger.config import DEFAULT_CONFIG
from general_ledger.database import get_db, init_db
from general_ledger.periods import create_fiscal_year, create_period


CASH = 100
BANK = 110
REVENUE = 400
EXPENSE = 500

TEST_ACCOUNTS = [
    {"id": CASH, "code": "1001", "name": "Cash", "balance_type": "debit"},
    {"id": BANK, "code": "1002", "name": "Bank", "balance_type": "debit", "is_bank": True},
    {"id": REVENUE, "code": "4001", "name": "Revenue", "balance_type": "credit"},
    {"id": EXPENSE, "code": "5001", "name": "Expenses", "balance_type": "debit"},
]


@pytest.fixture
def config():
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "ledger.db")


@pytest.fixture
def conn(db_path):
    """Ledger with four accounts and two open periods (ids 1 and 2)."""
    with get_db(db_path) as conn:
        init_db(conn)
        load_accounts(conn, TEST_ACCOUNTS)
        year_id = create_fiscal_year(conn, 2026)
        create_period(conn, "2026-01-01", "2026-01-31", name="2026-01", fiscal_year_id=year_id)
        create_period(conn, "2026-02-01", "2026-02-28", name="2026-02", fiscal_year_id=year_id)
        conn.commit()
        yield conn


def sale_lines(amount=500.0, debit_account=CASH, credit_account=REVENUE):
    return [
        {"account_id": debit_account, "debit_amount": amount, "description": "sale"},
        {"account_id": credit_account, "credit_amount": amount, "description": "sale"},
    ]


def entry_header(**overrides):
    header = {"date": "2026-01-15", "fiscal_period_id": 1, "description": "test entry"}
    header.update(overrides)
    return header
