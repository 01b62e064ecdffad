"""
Google Drive authorization.

GET /auth             consent URL for the Drive account
GET /oauth2callback   redirect target, exchanges ?code= for a token pair
"""

import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from manp_api.api.deps import get_credential_store
from manp_api.services.credential_store import CredentialStore

router = APIRouter()


@router.get("/auth", response_class=PlainTextResponse)
async def authorize(credential_store: CredentialStore = Depends(get_credential_store)):
    url = credential_store.authorization_url()
    return f"Open this URL to grant Google Drive access:\n{url}"


@router.get("/oauth2callback", response_class=PlainTextResponse)
async def oauth2_callback(code: str, credential_store: CredentialStore = Depends(get_credential_store)):
    # Token exchange is a blocking HTTP call
    await asyncio.to_thread(credential_store.exchange_code, code)
    return "Authorization successful. Google Drive token saved."
