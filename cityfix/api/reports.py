from typing import Optional

from fastapi import APIRouter, Depends, Query

from cityfix.dependencies import get_report_service, read_status_update, require_admin
from cityfix.schemas.auth import AuthUser
from cityfix.schemas.report import ReportCreate, ReportStatusUpdate
from cityfix.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("")
def list_reports(
    type: Optional[str] = Query(None, description="Only reports of this category"),
    status: Optional[str] = Query(None, description="pending | in-progress | resolved"),
    search: Optional[str] = Query(None, description="Match title, description or location"),
    service: ReportService = Depends(get_report_service),
):
    """All reports, newest first."""
    reports = service.list_reports(type=type, status=status, search=search)
    return {"success": True, "reports": reports}


@router.get("/summary")
def report_summary(service: ReportService = Depends(get_report_service)):
    """Counts per status and per category for the dashboard."""
    return {"success": True, "summary": service.summarize()}


@router.get("/{report_id}")
def get_report(report_id: str, service: ReportService = Depends(get_report_service)):
    return {"success": True, "report": service.get_report(report_id)}


@router.post("")
def create_report(payload: ReportCreate, service: ReportService = Depends(get_report_service)):
    """Submit a new report. Anyone may report an issue."""
    return {"success": True, "report": service.create_report(payload)}


@router.patch("/{report_id}/status")
def update_report_status(
    report_id: str,
    admin: AuthUser = Depends(require_admin),
    payload: ReportStatusUpdate = Depends(read_status_update),
    service: ReportService = Depends(get_report_service),
):
    return {"success": True, "report": service.update_status(report_id, payload.status)}


@router.delete("/{report_id}")
def delete_report(
    report_id: str,
    admin: AuthUser = Depends(require_admin),
    service: ReportService = Depends(get_report_service),
):
    service.delete_report(report_id)
    return {"success": True, "message": "Report deleted successfully"}
