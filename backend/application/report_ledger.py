"""Append-only ledger of completed-session reports."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List

from domain.errors import InvalidRequestError
from domain.report import Report
from infrastructure.repository import LoungeRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("device_id", "date", "start_time", "end_time", "game_type", "cost")


@dataclass(frozen=True)
class DailySummary:
    day: date
    session_count: int
    total_minutes: int
    revenue: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "sessionCount": self.session_count,
            "totalMinutes": self.total_minutes,
            "totalRevenue": float(self.revenue),
        }


class ReportLedger:
    def __init__(self, repository: LoungeRepository):
        self.repo = repository

    def check(self, report: Report) -> None:
        missing = [name for name in REQUIRED_FIELDS if getattr(report, name, None) is None]
        if missing:
            raise InvalidRequestError(f"Report is missing {', '.join(missing)}")

    def append(self, report: Report) -> None:
        self.check(report)
        self.repo.add_report(report)

    def query_by_date(self, day: date) -> List[Report]:
        """Reports whose session ended on ``day``, oldest start first."""
        return sorted(self.repo.list_reports(day), key=lambda report: report.start_time)

    def total_revenue(self, day: date) -> Decimal:
        return sum((report.cost for report in self.repo.list_reports(day)), Decimal("0.00"))

    def summarize(self, day: date) -> DailySummary:
        reports = self.query_by_date(day)
        return DailySummary(
            day=day,
            session_count=len(reports),
            total_minutes=sum(report.duration_minutes for report in reports),
            revenue=sum((report.cost for report in reports), Decimal("0.00")),
        )

    def delete_all(self) -> int:
        removed = self.repo.delete_all_reports()
        logger.info("Deleted %d reports", removed)
        return removed
