import pytest

from general_ledger.periods import (
    assert_period_open,
    close_period,
    create_period,
    find_period_for_date,
    get_period,
    list_periods,
    reopen_period,
    require_period,
)
from general_ledger.utils import ClosedPeriodError, InvalidPeriodError, NotFoundError, ValidationError


def test_get_period(conn):
    period = get_period(conn, 1)
    assert period.name == "2026-01"
    assert period.is_closed is False
    assert get_period(conn, 42) is None


def test_require_period_missing(conn):
    with pytest.raises(InvalidPeriodError) as exc:
        require_period(conn, 42)
    assert exc.value.code == "INVALID_PERIOD"


def test_close_and_reopen(conn):
    assert close_period(conn, 1, actor_id=8)["status"] == "closed"
    with pytest.raises(ClosedPeriodError):
        assert_period_open(conn, 1)
    assert [p["id"] for p in list_periods(conn, "closed")] == [1]

    reopen_period(conn, 1)
    assert assert_period_open(conn, 1).status == "open"


def test_close_missing_period(conn):
    with pytest.raises(NotFoundError):
        close_period(conn, 42)


def test_find_period_for_date(conn):
    assert find_period_for_date(conn, "2026-02-14").id == 2
    assert find_period_for_date(conn, "2025-12-31") is None


def test_create_period_validates_dates(conn):
    with pytest.raises(ValidationError):
        create_period(conn, "2026-03-31", "2026-03-01")
    period_id = create_period(conn, "2026-03-01", "2026-03-31")
    assert get_period(conn, period_id).name == "2026-03"
