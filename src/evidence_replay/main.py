"""
Evidence Replay - FastAPI Application Entry Point.

Exposes evidence chain verification to services that embed the verifier.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api import verify_router
from .config import get_settings
from .logging_config import setup_json_logging

logger = logging.getLogger("evidence_replay")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    setup_json_logging(settings.log_level, settings.json_logs)
    logger.info("Evidence Replay API starting", extra={"action": "startup"})

    yield

    logger.info("Evidence Replay API shutting down", extra={"action": "shutdown"})


app = FastAPI(
    title="Evidence Replay Engine",
    description="""
# Evidence Chain Verification

Verify exported network-flow evidence chains:
- **Blob hashes**: every blob's hash recomputed from its canonical record fields
- **Chain linkage**: every blob linked to its predecessor's hash
- **Chain hash**: aggregate digest over the whole sequence

Tampering is reported in the response body, not as an HTTP error.
    """,
    version=get_settings().version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(verify_router)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with API information."""
    settings = get_settings()
    return {
        "name": settings.app_name,
        "version": settings.version,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "verify_export": "/verify/export",
            "verify_raw": "/verify/raw",
            "canonical_hash": "/verify/canonical-hash",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    """Validation errors without echoing the rejected input, which may not encode as UTF-8."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": [
                {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in exc.errors()
            ],
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.exception(
        "Unhandled error",
        extra={"action": "request_error", "endpoint": request.url.path, "error": str(exc)},
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
        },
    )


def main():
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "evidence_replay.main:app",
        host="127.0.0.1",
        port=8000,
    )


if __name__ == "__main__":
    main()
