from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

logger = structlog.get_logger()


class ServiceError(Exception):
    """Base class for errors the API turns into a JSON error body."""

    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ReportStoreError(ServiceError):
    code = "store_error"


class RemoteUploadError(ServiceError):
    code = "remote_upload_error"


class CredentialError(ServiceError):
    code = "credential_error"


def error_response(message: str, code: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code})


async def service_exception_handler(request: Request, exc: ServiceError):
    logger.error("service_error", error=exc.message, code=exc.code, path=request.url.path)
    return error_response(exc.message, exc.code)


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all for unhandled exceptions.
    Prevents stack trace leakage to clients.
    """
    logger.error("unhandled_exception", error=str(exc), path=request.url.path)
    return error_response("An unexpected error occurred.", ServiceError.code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "code": "http_error"},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Malformed payloads are reported as 500 like every other failure,
    with a distinct code so clients can tell them apart.
    """
    logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
    return error_response("Invalid request payload.", "invalid_request")
