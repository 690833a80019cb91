"""Unit tests for the report ledger."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from application.report_ledger import ReportLedger
from domain.errors import InvalidRequestError
from domain.report import Report
from domain.session import GameType

from conftest import T0


def make_report(device_id: str, start_offset_min: int, minutes: int, cost: str) -> Report:
    start = T0 + timedelta(minutes=start_offset_min)
    end = start + timedelta(minutes=minutes)
    return Report(
        device_id=device_id,
        date=end.date(),
        start_time=start,
        end_time=end,
        duration_minutes=minutes,
        game_type=GameType.SINGLE,
        cost=Decimal(cost),
    )


@pytest.fixture
def ledger(repository) -> ReportLedger:
    return ReportLedger(repository)


def test_query_by_date_orders_by_start_time(ledger):
    late = make_report("b", 60, 10, "3.33")
    early = make_report("a", 0, 30, "10.00")
    ledger.append(late)
    ledger.append(early)

    assert ledger.query_by_date(T0.date()) == [early, late]


def test_query_by_date_filters_on_end_day(ledger):
    today = make_report("a", 0, 30, "10.00")
    # starts today, ends after midnight
    overnight = make_report("b", 5 * 60 + 50, 20, "6.67")
    ledger.append(today)
    ledger.append(overnight)

    assert ledger.query_by_date(T0.date()) == [today]
    assert ledger.query_by_date(T0.date() + timedelta(days=1)) == [overnight]
    assert ledger.query_by_date(date(2000, 1, 1)) == []


def test_summarize(ledger):
    ledger.append(make_report("a", 0, 30, "10.00"))
    ledger.append(make_report("b", 10, 45, "22.50"))

    summary = ledger.summarize(T0.date())

    assert summary.session_count == 2
    assert summary.total_minutes == 75
    assert summary.revenue == Decimal("32.50")
    assert ledger.total_revenue(T0.date()) == Decimal("32.50")
    assert summary.to_dict()["totalRevenue"] == 32.5


def test_empty_day_has_zero_revenue(ledger):
    assert ledger.total_revenue(T0.date()) == Decimal("0.00")


def test_delete_all(ledger):
    ledger.append(make_report("a", 0, 30, "10.00"))
    ledger.append(make_report("b", 10, 45, "22.50"))

    assert ledger.delete_all() == 2
    assert ledger.query_by_date(T0.date()) == []


def test_append_requires_fields(ledger):
    broken = Report(
        device_id="a",
        date=T0.date(),
        start_time=T0,
        end_time=None,
        duration_minutes=0,
        game_type=GameType.SINGLE,
        cost=Decimal("0"),
    )
    with pytest.raises(InvalidRequestError):
        ledger.append(broken)


def test_reports_are_immutable():
    report = make_report("a", 0, 30, "10.00")
    with pytest.raises(AttributeError):
        report.cost = Decimal("0")
