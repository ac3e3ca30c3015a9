"""Entry point for the Registry service."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from registry.config import REGISTRY_HOST, REGISTRY_PORT
from registry.database import init_database
from registry.routes.invoke_routes import router as invoke_router
from registry.exceptions import (
    RegistryException,
    ProtocolError,
    ValidationError,
    AlreadyExistsError,
    NotFoundError,
    MalformedKeyError,
    LedgerError
)

logger = setup_logging('registry')

app = FastAPI(
    title="Folio Registry",
    description="File registry with shared records, restricted details and a content-hash index",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.

    Request bodies are never logged: they may carry the transient map.
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
    Initialize database on application startup.
    """
    logger.info("Registry service starting up...")
    init_database()
    logger.info("Database initialized")


def _error_response(request: Request, exc: RegistryException, status_code: int, label: str) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    if status_code >= 500:
        logger.error(f"{label} error: {exc} [request_id={request_id}] path={request.url.path}")
    else:
        logger.warning(f"{label} error: {exc} [request_id={request_id}] path={request.url.path}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": exc.code}
    )


@app.exception_handler(ProtocolError)
async def protocol_error_handler(request: Request, exc: ProtocolError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "Protocol")


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "Validation")


@app.exception_handler(AlreadyExistsError)
async def already_exists_handler(request: Request, exc: AlreadyExistsError):
    return _error_response(request, exc, status.HTTP_409_CONFLICT, "Already exists")


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "Not found")


@app.exception_handler(MalformedKeyError)
async def malformed_key_handler(request: Request, exc: MalformedKeyError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "Malformed key")


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "Ledger")


@app.exception_handler(RegistryException)
async def registry_exception_handler(request: Request, exc: RegistryException):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "Registry")


app.include_router(invoke_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "Folio Registry API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    """
    return {"status": "healthy", "service": "registry"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "registry.main:app",
        host=REGISTRY_HOST,
        port=REGISTRY_PORT,
    )


if __name__ == "__main__":
    main()
