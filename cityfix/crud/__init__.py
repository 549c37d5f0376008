from .report import ReportRepository, report_key

__all__ = ["ReportRepository", "report_key"]
