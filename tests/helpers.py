import shutil

from manp_api.core.config import settings
from manp_api.core.exceptions import RemoteUploadError
from manp_api.db.base import Base
from manp_api.db.session import engine
from manp_api.models.report import Report  # noqa: F401
from manp_api.services.drive_service import RemoteFile


async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    shutil.rmtree(settings.UPLOAD_DIR, ignore_errors=True)


def report_payload(**overrides):
    payload = {
        "user_id": "u1",
        "denr_personnels": ["A"],
        "activity_date_start": "2024-01-01T00:00:00Z",
        "location": "Site A",
        "persons_involved": "x",
        "complaint_description": "y",
        "action_taken": "z",
        "recommendation": "w",
        "created_at": "2024-01-01T10:00:00Z",
    }
    payload.update(overrides)
    return payload


class FakeUploader:
    """Stands in for DriveUploader; fails for the filenames in `fail_on`."""

    def __init__(self, fail_on=(), available=True):
        self.fail_on = set(fail_on)
        self.available = available
        self.calls = []

    async def upload_file(self, content, filename, mime_type, user_id, timestamp):
        self.calls.append((filename, mime_type, user_id))
        if filename in self.fail_on:
            raise RemoteUploadError(f"Failed to upload {filename} to Google Drive: quota exceeded")
        return RemoteFile(
            remote_id=f"drive-{filename}",
            remote_link=f"https://drive.google.com/file/d/drive-{filename}/view",
        )
