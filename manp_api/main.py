from contextlib import asynccontextmanager
import webbrowser

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from manp_api.core.config import settings
from manp_api.core.logging import setup_logging
from manp_api.core.exceptions import (
    ServiceError,
    global_exception_handler,
    http_exception_handler,
    service_exception_handler,
    validation_exception_handler,
)
from manp_api.api.deps import get_credential_store
from manp_api.db.init_db import init_db

# Setup Logging
setup_logging()
logger = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create tables, load the Drive token, and in development
    open the consent page when no token has been stored yet.
    """
    logger.info("startup", project=settings.PROJECT_NAME, environment=settings.ENVIRONMENT)
    await init_db()

    credential_store = get_credential_store()
    if not credential_store.load() and settings.DRIVE_UPLOAD_ENABLED:
        logger.warning("drive_not_authorized", hint="GET /auth or run manp-auth")
        if settings.open_auth_url_on_startup and settings.CLIENT_ID:
            webbrowser.open(credential_store.authorization_url())
    yield
    logger.info("shutdown")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Field incident report sync and photo upload service",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,  # must stay False with wildcard origins
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception Handlers
app.add_exception_handler(ServiceError, service_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.get("/", response_class=PlainTextResponse, tags=["system"])
async def liveness():
    return "MANP Monitoring service API is live."


from manp_api.api.v1 import reports, auth  # noqa: E402

app.include_router(reports.router, tags=["reports"])
app.include_router(auth.router, tags=["auth"])
