from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Any, Callable, Dict, List, Optional

from cityfix.crud.report import ReportRepository
from cityfix.exceptions import NotFoundError, ValidationError
from cityfix.schemas.report import (
    REPORT_STATUSES,
    REPORT_TYPES,
    Report,
    ReportCreate,
    ReportStatus,
    ReportSummary,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "type", "location")


def now_ms() -> int:
    return int(time.time() * 1000)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class ReportService:
    """Validation, identity assignment and orchestration for reports."""

    def __init__(self, repository: ReportRepository, clock: Callable[[], int] = now_ms):
        self.repository = repository
        self.clock = clock

    def list_reports(
        self,
        *,
        type: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        if type is not None and type not in REPORT_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(REPORT_TYPES)}")
        if status is not None and status not in REPORT_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(REPORT_STATUSES)}")

        reports = self.repository.list_all()
        if type is not None:
            reports = [r for r in reports if r.get("type") == type]
        if status is not None:
            reports = [r for r in reports if r.get("status") == status]
        term = (search or "").strip().lower()
        if term:
            reports = [
                r for r in reports
                if any(term in str(r.get(field) or "").lower() for field in ("title", "description", "location"))
            ]
        return reports

    def summarize(self) -> Dict[str, Any]:
        reports = self.repository.list_all()
        by_status = Counter(r.get("status") for r in reports)
        by_type = Counter(r.get("type") for r in reports)
        return ReportSummary(
            total=len(reports),
            by_status={s: by_status.get(s, 0) for s in REPORT_STATUSES},
            by_type={t: by_type.get(t, 0) for t in REPORT_TYPES},
        ).model_dump()

    def get_report(self, report_id: str) -> Dict[str, Any]:
        report = self.repository.get_one(report_id)
        if report is None:
            raise NotFoundError("Report not found")
        return report

    def create_report(self, payload: ReportCreate) -> Dict[str, Any]:
        if any(_is_blank(getattr(payload, field)) for field in REQUIRED_FIELDS):
            raise ValidationError("Missing required fields")
        if payload.type not in REPORT_TYPES:
            raise ValidationError(f"Invalid report type. Must be one of: {', '.join(REPORT_TYPES)}")

        timestamp = self.clock()
        report_id = self._free_id(timestamp)
        report = Report(
            id=report_id,
            title=payload.title,
            description=payload.description,
            type=payload.type,
            location=payload.location,
            imageUrl=payload.imageUrl or None,
            status=ReportStatus.pending,
            timestamp=timestamp,
        )
        record = report.model_dump()
        self.repository.create(record)
        logger.info("Created report %s (%s)", report_id, record["type"])
        return record

    def update_status(self, report_id: str, status: Optional[str]) -> Dict[str, Any]:
        if not status or status not in REPORT_STATUSES:
            raise ValidationError("Invalid status")
        updated = self.repository.update_status(report_id, status)
        logger.info("Report %s status -> %s", report_id, status)
        return updated

    def delete_report(self, report_id: str) -> None:
        # Existence is checked first so a missing report is a clean 404
        if not self.repository.exists(report_id):
            raise NotFoundError("Report not found")
        self.repository.delete(report_id)
        logger.info("Deleted report %s", report_id)

    def _free_id(self, timestamp: int) -> str:
        candidate = timestamp
        while self.repository.exists(str(candidate)):
            candidate += 1
        return str(candidate)
