"""Entry point for the fragments service."""

import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.logging_config import setup_logging
from fragments import config
from fragments.cleanup_task import TombstoneSweeper
from fragments.exceptions import (
    ContentMismatchError,
    ConversionError,
    FragmentNotFoundError,
    FragmentsException,
    FragmentValidationError,
    InvalidCredentialsError,
    PayloadTooLargeError,
    StorageError,
    TypeChangeError,
    UnsupportedConversionError,
    UnsupportedTypeError
)
from fragments.routes import fragment_router
from fragments.schemas.common import create_error_response
from fragments.schemas.fragments import HealthResponse
from fragments.service_locator import get_storage_backend
from fragments.storage.base import StorageBackend
from fragments.storage.durable import DurableBackend

logger = setup_logging('fragments')

app = FastAPI(
    title="Fragments",
    description="Multi-tenant store for typed fragments with format conversion",
    version=config.SERVICE_VERSION
)

storage_backend: Optional[StorageBackend] = None
tombstone_sweeper: Optional[TombstoneSweeper] = None


def error_response(code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content=create_error_response(code, message),
        headers=headers
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Resolve the storage backend once and start the tombstone sweeper for the durable backend.
    """
    global storage_backend, tombstone_sweeper

    logger.info("Fragments service starting up...")

    storage_backend = get_storage_backend()
    logger.info(f"Storage backend ready: {storage_backend.name}")

    if isinstance(storage_backend, DurableBackend):
        tombstone_sweeper = TombstoneSweeper(storage_backend)
        await tombstone_sweeper.start()


@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup resources on application shutdown.
    """
    global storage_backend, tombstone_sweeper

    logger.info("Fragments service shutting down...")

    if tombstone_sweeper:
        await tombstone_sweeper.stop()
        tombstone_sweeper = None

    if storage_backend:
        await storage_backend.close()
        storage_backend = None


@app.exception_handler(FragmentValidationError)
async def fragment_validation_handler(request: Request, exc: FragmentValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Fragment validation error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(TypeChangeError)
async def type_change_handler(request: Request, exc: TypeChangeError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Type change rejected: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid credentials error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(
        status.HTTP_401_UNAUTHORIZED,
        str(exc),
        headers={"WWW-Authenticate": 'Basic realm="fragments"'}
    )


@app.exception_handler(FragmentNotFoundError)
async def fragment_not_found_handler(request: Request, exc: FragmentNotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Fragment not found error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(PayloadTooLargeError)
async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Payload too large: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(exc))


@app.exception_handler(UnsupportedTypeError)
async def unsupported_type_handler(request: Request, exc: UnsupportedTypeError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Unsupported type error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, str(exc))


@app.exception_handler(ContentMismatchError)
async def content_mismatch_handler(request: Request, exc: ContentMismatchError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Content mismatch error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, f"Unsupported content-type: {exc}")


@app.exception_handler(UnsupportedConversionError)
async def unsupported_conversion_handler(request: Request, exc: UnsupportedConversionError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Unsupported conversion error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, str(exc))


@app.exception_handler(ConversionError)
async def conversion_error_handler(request: Request, exc: ConversionError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Conversion error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))


@app.exception_handler(FragmentsException)
async def fragments_exception_handler(request: Request, exc: FragmentsException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Fragments exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "unable to process request")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "not found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


app.include_router(fragment_router)


@app.get("/", response_model=HealthResponse)
async def root():
    """
    Root endpoint for health check. Clients should not cache it.
    """
    body = HealthResponse(service="fragments", version=config.SERVICE_VERSION)
    return JSONResponse(content=body.model_dump(), headers={"Cache-Control": "no-cache"})


@app.get("/health")
async def health_check():
    """
    Liveness endpoint for container health checks.
    """
    return {"status": "healthy", "service": "fragments"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "fragments.main:app",
        host=config.FRAGMENTS_HOST,
        port=config.FRAGMENTS_PORT
    )


if __name__ == "__main__":
    main()
