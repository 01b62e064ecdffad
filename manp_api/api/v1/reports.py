"""
Report API.

POST /sync            bulk insert of reports held on the device
GET  /reports/{id}    reports of one user, newest first
POST /upload-report   one report + photo files (multipart)
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from manp_api.api.deps import get_db, get_drive_uploader
from manp_api.schemas.report import (
    ReportListResponse,
    SyncRequest,
    SyncResponse,
    UploadReportIn,
    UploadReportResponse,
)
from manp_api.services.drive_service import DriveUploader
from manp_api.services.report_service import ReportService
from manp_api.services.report_store import ReportStore

logger = structlog.get_logger()

router = APIRouter()


@router.post("/sync", response_model=SyncResponse)
async def sync_reports(request: SyncRequest, db: AsyncSession = Depends(get_db)):
    logger.info("sync_started", count=len(request.reports))
    return await ReportService.sync_reports(db, request.reports)


@router.get("/reports/{user_id}", response_model=ReportListResponse)
async def list_reports(user_id: str, db: AsyncSession = Depends(get_db)):
    reports = await ReportStore.list_for_user(db, user_id)
    return ReportListResponse(reports=reports)


@router.post("/upload-report", response_model=UploadReportResponse)
async def upload_report(
    request: Request,
    db: AsyncSession = Depends(get_db),
    uploader: Optional[DriveUploader] = Depends(get_drive_uploader),
):
    """
    Multipart body: a `report` text field holding the report JSON,
    plus any number of file parts (field names are not checked).
    """
    async with request.form() as form:
        raw_report = form.get("report")
        if not isinstance(raw_report, str):
            raise RequestValidationError(
                [{"type": "missing", "loc": ("body", "report"), "msg": "Field required", "input": None}]
            )
        try:
            report = UploadReportIn.model_validate_json(raw_report)
        except ValidationError as e:
            raise RequestValidationError(e.errors(include_url=False)) from e

        files = [value for _, value in form.multi_items() if isinstance(value, UploadFile)]
        return await ReportService.upload_report(db, report, files, uploader)
