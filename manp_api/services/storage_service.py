import os
import aiofiles
from pathlib import Path

from manp_api.core.config import settings
from manp_api.core.time_utils import sanitize_timestamp


def safe_component(value: str, fallback: str) -> str:
    # Strip any directory part so client-supplied names stay inside UPLOAD_DIR
    name = os.path.basename(str(value).replace("\\", "/")).strip()
    if name in ("", ".", ".."):
        return fallback
    return name


class StorageService:
    """
    Local staging copy of every uploaded file:
    <UPLOAD_DIR>/<user_id>/<sanitized timestamp>/<filename>
    """

    @classmethod
    def upload_dir(cls) -> str:
        return settings.UPLOAD_DIR

    @classmethod
    async def save_file(cls, content: bytes, user_id: str, timestamp, filename: str) -> str:
        """
        Save file to local storage.
        Returns the path relative to the working directory.
        """
        directory = Path(cls.upload_dir()) / safe_component(user_id, "unknown") / safe_component(
            sanitize_timestamp(timestamp), "undated"
        )
        directory.mkdir(parents=True, exist_ok=True)

        file_path = directory / safe_component(filename, "unnamed")

        async with aiofiles.open(file_path, 'wb') as f:
            await f.write(content)

        return file_path.as_posix()
