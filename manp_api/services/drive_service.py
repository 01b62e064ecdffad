"""
Google Drive uploader.

Files land in <root folder>/<user_id>/<sanitized timestamp>/<filename>.
Folders are looked up by name under their parent and created when missing.

The Drive SDK is blocking, every call runs in a worker thread.
"""

import asyncio
import io
import weakref
from dataclasses import dataclass
from typing import Callable, Optional

import httplib2
import structlog
from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from manp_api.core.config import settings
from manp_api.core.exceptions import CredentialError, RemoteUploadError
from manp_api.core.time_utils import sanitize_timestamp
from manp_api.services.credential_store import CredentialStore

logger = structlog.get_logger()

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

_UPLOAD_ERRORS = (HttpError, GoogleAuthError, CredentialError, httplib2.HttpLib2Error, OSError)


def _escape_query(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


@dataclass
class RemoteFile:
    remote_id: str
    remote_link: Optional[str] = None


class DriveUploader:
    def __init__(
        self,
        credential_store: CredentialStore,
        root_folder_id: str = "root",
        share_public: bool = True,
        service_factory: Optional[Callable] = None,
    ):
        self.credential_store = credential_store
        self.root_folder_id = root_folder_id
        self.share_public = share_public
        self._service_factory = service_factory or self._build_service
        # find-or-create is serialized per (parent, name) within this process.
        # Entries drop out once no coroutine holds or waits on the lock.
        self._folder_locks = weakref.WeakValueDictionary()

    @classmethod
    def from_settings(cls, credential_store: CredentialStore) -> "DriveUploader":
        return cls(
            credential_store,
            root_folder_id=settings.DRIVE_ROOT_FOLDER_ID,
            share_public=settings.DRIVE_SHARE_PUBLIC,
        )

    @property
    def available(self) -> bool:
        return self.credential_store.has_token

    @staticmethod
    def _build_service(creds):
        return build("drive", "v3", credentials=creds, cache_discovery=False)

    def _service(self):
        creds = self.credential_store.credentials()
        return self._service_factory(creds), creds

    async def find_or_create_folder(self, name: str, parent_id: str) -> str:
        key = (parent_id, name)
        lock = self._folder_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._folder_locks[key] = lock
        async with lock:
            return await asyncio.to_thread(self._find_or_create_folder_sync, name, parent_id)

    def _find_or_create_folder_sync(self, name: str, parent_id: str) -> str:
        service, creds = self._service()
        query = (
            f"name = '{_escape_query(name)}' and mimeType = '{FOLDER_MIME_TYPE}' "
            f"and '{_escape_query(parent_id)}' in parents and trashed = false"
        )
        result = service.files().list(q=query, fields="files(id, name)", spaces="drive", pageSize=1).execute()
        files = result.get("files", [])
        if files:
            folder_id = files[0]["id"]
        else:
            folder = service.files().create(
                body={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]},
                fields="id",
            ).execute()
            folder_id = folder["id"]
            logger.info("drive_folder_created", name=name, parent_id=parent_id, folder_id=folder_id)

        self.credential_store.record_refresh(creds)
        return folder_id

    def _upload_sync(self, content: bytes, filename: str, mime_type: str, folder_id: str) -> RemoteFile:
        service, creds = self._service()
        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)
        created = service.files().create(
            body={"name": filename, "parents": [folder_id]},
            media_body=media,
            fields="id, webViewLink",
        ).execute()

        if self.share_public:
            service.permissions().create(
                fileId=created["id"],
                body={"type": "anyone", "role": "reader"},
            ).execute()

        self.credential_store.record_refresh(creds)
        return RemoteFile(remote_id=created["id"], remote_link=created.get("webViewLink"))

    async def upload_file(
        self,
        content: bytes,
        filename: str,
        mime_type: Optional[str],
        user_id: str,
        timestamp,
    ) -> RemoteFile:
        """
        Upload one file under <root>/<user_id>/<timestamp>/.
        Raises RemoteUploadError on any auth, network or API failure.
        """
        mime_type = mime_type or "application/octet-stream"
        try:
            user_folder_id = await self.find_or_create_folder(user_id, self.root_folder_id)
            timestamp_folder_id = await self.find_or_create_folder(sanitize_timestamp(timestamp), user_folder_id)
            remote = await asyncio.to_thread(self._upload_sync, content, filename, mime_type, timestamp_folder_id)
        except _UPLOAD_ERRORS as e:
            raise RemoteUploadError(f"Failed to upload {filename} to Google Drive: {e}") from e

        logger.info("drive_file_uploaded", filename=filename, user_id=user_id, remote_id=remote.remote_id)
        return remote
