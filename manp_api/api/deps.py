from functools import lru_cache
from typing import Optional

from fastapi import Depends

from manp_api.core.config import settings
from manp_api.db.session import get_db  # noqa: F401  re-exported for routers
from manp_api.services.credential_store import CredentialStore
from manp_api.services.drive_service import DriveUploader


@lru_cache
def get_credential_store() -> CredentialStore:
    """
    Process-wide credential store. Override in tests with
    app.dependency_overrides[get_credential_store].
    """
    return CredentialStore.from_settings()


@lru_cache
def _drive_uploader(credential_store: CredentialStore) -> DriveUploader:
    return DriveUploader.from_settings(credential_store)


def get_drive_uploader(
    credential_store: CredentialStore = Depends(get_credential_store),
) -> Optional[DriveUploader]:
    """None when remote upload is switched off."""
    if not settings.DRIVE_UPLOAD_ENABLED:
        return None
    return _drive_uploader(credential_store)
