"""
Report Model - the `reports` table.

One row per field report. Rows are written once through
INSERT ... ON CONFLICT(id) DO NOTHING and never updated or deleted.

Array-valued columns (denr_personnels, other_agency_personnels, photos)
hold JSON text, see manp_api.services.report_store for the encode/decode pair.
"""

from sqlalchemy import Column, String, Integer, DateTime, Text

from manp_api.db.base import Base


class Report(Base):
    __tablename__ = "reports"

    # "<user_id>-<epoch_millis>" for uploads, client generated for synced reports
    id = Column(String(255), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)

    denr_personnels = Column(Text, nullable=False)
    other_agency_personnels = Column(Text, nullable=True)

    activity_date_start = Column(DateTime(timezone=True), nullable=False)
    activity_date_end = Column(DateTime(timezone=True), nullable=True)

    location = Column(Text, nullable=True)
    persons_involved = Column(Text, nullable=True)
    complaint_description = Column(Text, nullable=True)
    action_taken = Column(Text, nullable=True)
    recommendation = Column(Text, nullable=True)

    # [{"filename", "local_path", "mime_type", "remote_id"?, "remote_link"?}]
    photos = Column(Text, nullable=True)

    synced = Column(Integer, default=1, nullable=False)

    # Client supplied; updated_at mirrors it since rows are never updated
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)
