"""
Report Store - parameterized persistence for the `reports` table.

Write rule: INSERT ... ON CONFLICT(id) DO NOTHING. The first row written
for an id wins; later inserts with the same id are silently dropped,
whatever their payload.

Array fields are JSON-encoded on the way in and decoded on the way out.
A missing list is stored as SQL NULL (never the string "null").
"""

import json
from typing import Any, Dict, List, Optional

from sqlalchemy import select, desc
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from manp_api.core.exceptions import ReportStoreError
from manp_api.core.time_utils import to_utc
from manp_api.models.report import Report
from manp_api.schemas.report import ReportFields, ReportOut

logger = structlog.get_logger()

_DIALECT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def encode_list(values: Optional[List[Any]]) -> Optional[str]:
    if values is None:
        return None
    return json.dumps(values)


def decode_list(raw: Optional[str]) -> Optional[List[Any]]:
    if raw is None or raw == "":
        return None
    return json.loads(raw)


class ReportStore:
    """
    Translates reports to SQL rows and back.
    """

    @staticmethod
    def build_row(
        report: ReportFields,
        report_id: str,
        photos: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        return {
            "id": report_id,
            "user_id": report.user_id,
            "denr_personnels": encode_list(report.denr_personnels),
            "other_agency_personnels": encode_list(report.other_agency_personnels),
            "activity_date_start": report.activity_date_start,
            "activity_date_end": report.activity_date_end,
            "location": report.location,
            "persons_involved": report.persons_involved,
            "complaint_description": report.complaint_description,
            "action_taken": report.action_taken,
            "recommendation": report.recommendation,
            "photos": encode_list(photos),
            "synced": 1,
            "created_at": report.created_at,
            "updated_at": report.created_at,
        }

    @staticmethod
    async def insert_report(session: AsyncSession, row: Dict[str, Any]) -> bool:
        """
        Insert one row, ignoring a primary key conflict.
        Commits immediately. Returns True if the row was written.
        """
        dialect = session.get_bind().dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            raise ReportStoreError(f"Unsupported database dialect: {dialect}")

        stmt = insert(Report.__table__).values(**row).on_conflict_do_nothing(index_elements=["id"])
        try:
            result = await session.execute(stmt)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("report_insert_failed", report_id=row.get("id"), error=str(e))
            raise ReportStoreError("Failed to store report.") from e

        inserted = result.rowcount == 1
        if not inserted:
            logger.info("report_duplicate_ignored", report_id=row["id"])
        return inserted

    @staticmethod
    async def list_for_user(session: AsyncSession, user_id: str) -> List[ReportOut]:
        """
        All reports of one user, newest `created_at` first.
        """
        stmt = select(Report).where(Report.user_id == user_id).order_by(desc(Report.created_at))
        try:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("report_list_failed", user_id=user_id, error=str(e))
            raise ReportStoreError("Failed to fetch reports.") from e

        return [ReportStore.to_report_out(row) for row in rows]

    @staticmethod
    def to_report_out(row: Report) -> ReportOut:
        return ReportOut(
            id=row.id,
            user_id=row.user_id,
            denr_personnels=decode_list(row.denr_personnels) or [],
            other_agency_personnels=decode_list(row.other_agency_personnels),
            activity_date_start=to_utc(row.activity_date_start),
            activity_date_end=to_utc(row.activity_date_end),
            location=row.location,
            persons_involved=row.persons_involved,
            complaint_description=row.complaint_description,
            action_taken=row.action_taken,
            recommendation=row.recommendation,
            photos=decode_list(row.photos),
            synced=row.synced,
            created_at=to_utc(row.created_at),
            updated_at=to_utc(row.updated_at),
        )
