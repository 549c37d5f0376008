from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# ======================
# ENUMERATIONS
# ======================

class ReportType(str, Enum):
    infrastructure = "infrastructure"
    safety = "safety"
    environment = "environment"
    traffic = "traffic"
    public_services = "public-services"
    other = "other"


class ReportStatus(str, Enum):
    pending = "pending"
    in_progress = "in-progress"
    resolved = "resolved"


REPORT_TYPES = [t.value for t in ReportType]
REPORT_STATUSES = [s.value for s in ReportStatus]

# ======================
# REQUEST MODELS
# ======================

class ReportCreate(BaseModel):
    """Submission form. Presence is checked by the service so a missing
    field gets the same 400 as an empty one."""
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    location: Optional[str] = None
    imageUrl: Optional[str] = None


class ReportStatusUpdate(BaseModel):
    status: Optional[str] = None

# ======================
# STORED RECORD
# ======================

class Report(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    type: ReportType
    location: str = Field(..., min_length=1)
    imageUrl: Optional[str] = None
    status: ReportStatus = ReportStatus.pending
    timestamp: int

    model_config = ConfigDict(use_enum_values=True)


class ReportSummary(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
