"""
Report ingestion.

Two ways in:
- sync: reports already built on the device, inserted as-is
- upload: one report plus its photo files, processed server-side

Both end in ReportStore.insert_report, so a repeated id is a no-op.
"""

import mimetypes
from typing import List, Optional

import structlog
from starlette.datastructures import UploadFile

from manp_api.core.exceptions import RemoteUploadError, ReportStoreError
from manp_api.core.time_utils import now_millis
from manp_api.schemas.report import (
    SyncReport,
    SyncResponse,
    UploadReportIn,
    UploadReportResponse,
)
from manp_api.services.drive_service import DriveUploader
from manp_api.services.report_store import ReportStore
from manp_api.services.storage_service import StorageService, safe_component

logger = structlog.get_logger()


class ReportService:

    @staticmethod
    async def sync_reports(session, reports: List[SyncReport]) -> SyncResponse:
        """
        Insert reports one by one, in the order received.
        A store failure stops the batch; rows written before it stay written.
        """
        inserted = 0
        for report in reports:
            row = ReportStore.build_row(report, report.id, report.photos)
            if await ReportStore.insert_report(session, row):
                inserted += 1

        logger.info("reports_synced", count=len(reports), inserted=inserted)
        return SyncResponse(count=len(reports), inserted=inserted)

    @staticmethod
    async def upload_report(
        session,
        report: UploadReportIn,
        files: List[UploadFile],
        uploader: Optional[DriveUploader] = None,
    ) -> UploadReportResponse:
        report_id = f"{report.user_id}-{now_millis()}"

        remote_enabled = uploader is not None and uploader.available
        if uploader is not None and not remote_enabled:
            logger.warning("remote_upload_skipped", report_id=report_id, reason="drive_not_authorized")

        photos = []
        photo_urls = []
        for upload in files:
            filename = safe_component(upload.filename or "", "unnamed")
            mime_type = upload.content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
            content = await upload.read()

            local_path = await StorageService.save_file(content, report.user_id, report.created_at, filename)
            photo = {"filename": filename, "local_path": local_path, "mime_type": mime_type}

            if remote_enabled:
                try:
                    remote = await uploader.upload_file(content, filename, mime_type, report.user_id, report.created_at)
                except RemoteUploadError as e:
                    # Keep the local copy, record the file without remote metadata
                    logger.warning("remote_upload_failed", report_id=report_id, filename=filename, error=e.message)
                else:
                    photo["remote_id"] = remote.remote_id
                    if remote.remote_link:
                        photo["remote_link"] = remote.remote_link
                        photo_urls.append(remote.remote_link)

            photos.append(photo)

        row = ReportStore.build_row(report, report_id, photos or None)
        if not await ReportStore.insert_report(session, row):
            # Same user, same millisecond: the earlier upload owns this id
            logger.warning("upload_report_id_collision", report_id=report_id, saved_photos=len(photos))
            raise ReportStoreError("A report with this id already exists, resubmit the report.")

        logger.info("report_uploaded", report_id=report_id, saved_photos=len(photos), remote_links=len(photo_urls))
        return UploadReportResponse(
            report_id=report_id,
            saved_photos=len(photos),
            photo_urls=photo_urls,
        )
