"""Main FastAPI application."""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.logging import setup_logging
from app.api import assistant, calls, health
from app.services.call_session.errors import CallLifecycleError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    if settings.call_store_backend == "database":
        from app.db.database import init_db

        await init_db()
    logger.info("Aira backend started")
    yield


app = FastAPI(
    title="Aira Backend",
    description="Backend for the Aira voice companion",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(CallLifecycleError)
async def call_lifecycle_error_handler(request: Request, exc: CallLifecycleError):
    logger.warning(
        f"[CALL ERROR] {request.method} {request.url.path} rejected - "
        f"kind: {exc.kind}, message: {exc.message}"
    )
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in errors
    ) or "Invalid request"
    logger.warning(f"[REQUEST] {request.method} {request.url.path} invalid - {message}")
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(health.router, tags=["health"])
app.include_router(calls.router, tags=["calls"])
app.include_router(assistant.router, tags=["assistant"])


@app.get("/")
async def root():
    """Liveness message."""
    return {"message": "Aira backend is running"}
