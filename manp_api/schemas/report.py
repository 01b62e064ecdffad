from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from manp_api.core.time_utils import to_utc


class ReportFields(BaseModel):
    """Fields shared by every inbound report payload."""
    user_id: str = Field(..., min_length=1)
    denr_personnels: List[str]
    other_agency_personnels: Optional[List[str]] = None
    activity_date_start: datetime
    activity_date_end: Optional[datetime] = None
    location: Optional[str] = None
    persons_involved: Optional[str] = None
    complaint_description: Optional[str] = None
    action_taken: Optional[str] = None
    recommendation: Optional[str] = None
    created_at: datetime

    @field_validator("activity_date_end", mode="before")
    @classmethod
    def blank_end_date_is_null(cls, v):
        # Devices send "" when the activity has no end date
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("activity_date_start", "activity_date_end", "created_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v)


class UploadReportIn(ReportFields):
    """The JSON `report` field of a multipart /upload-report request"""


class SyncReport(ReportFields):
    """A report held on the device, already carrying its id and photo metadata"""
    id: str = Field(..., min_length=1)
    # Attachment descriptors as the device recorded them, stored verbatim
    photos: Optional[List[Dict[str, Any]]] = None
    # Sent by clients but always stored as 1
    synced: Optional[int] = None


class SyncRequest(BaseModel):
    reports: List[SyncReport]


class SyncResponse(BaseModel):
    success: bool = True
    # Number of reports received, duplicates included
    count: int
    # Rows actually written
    inserted: int


class ReportOut(BaseModel):
    id: str
    user_id: str
    denr_personnels: List[str]
    other_agency_personnels: Optional[List[str]] = None
    activity_date_start: datetime
    activity_date_end: Optional[datetime] = None
    location: Optional[str] = None
    persons_involved: Optional[str] = None
    complaint_description: Optional[str] = None
    action_taken: Optional[str] = None
    recommendation: Optional[str] = None
    photos: Optional[List[Dict[str, Any]]] = None
    synced: int
    created_at: datetime
    updated_at: datetime


class ReportListResponse(BaseModel):
    success: bool = True
    reports: List[ReportOut]


class UploadReportResponse(BaseModel):
    success: bool = True
    report_id: str
    saved_photos: int
    photo_urls: List[str]
