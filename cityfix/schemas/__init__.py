# cityfix/schemas/__init__.py

# Report schemas
from .report import (
    Report,
    ReportCreate,
    ReportStatus,
    ReportStatusUpdate,
    ReportSummary,
    ReportType,
    REPORT_STATUSES,
    REPORT_TYPES,
)

# Auth schemas
from .auth import AuthSession, AuthUser, LoginRequest, SessionTokens

__all__ = [
    "Report",
    "ReportCreate",
    "ReportStatus",
    "ReportStatusUpdate",
    "ReportSummary",
    "ReportType",
    "REPORT_STATUSES",
    "REPORT_TYPES",
    "AuthSession",
    "AuthUser",
    "LoginRequest",
    "SessionTokens",
]
