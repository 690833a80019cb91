"""Reports: daily session list with revenue, bulk delete, last-session summary."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from interfaces import deps

router = APIRouter(tags=["report"])


@router.get("/reports")
def get_reports(day: Optional[str] = Query(default=None, alias="date")) -> Dict[str, Any]:
    """Sessions that ended on ``date`` (YYYY-MM-DD, default today), oldest first."""
    if day:
        try:
            selected = date.fromisoformat(day)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Invalid date") from exc
    else:
        selected = deps.engine.clock().date()

    reports = deps.engine.query_reports(selected)
    summary = deps.engine.summarize_reports(selected)
    return {
        "summary": summary.to_dict(),
        "reports": [report.to_dict() for report in reports],
    }


@router.delete("/reports")
def delete_reports() -> Dict[str, Any]:
    removed = deps.engine.delete_all_reports()
    return {"deleted": removed}


@router.get("/summary")
def last_summary() -> Dict[str, Any]:
    """Most recently ended session, until it is dismissed."""
    report = deps.engine.last_ended_report
    return {"report": report.to_dict() if report else None}


@router.delete("/summary")
def dismiss_summary(report_id: Optional[str] = Query(default=None, alias="reportId")) -> Dict[str, Any]:
    return {"dismissed": deps.engine.dismiss_summary(report_id)}
