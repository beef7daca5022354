"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.logging_config import configure_logging
from app.db.session import async_session_maker
from app.errors import PersistenceError, RefDataError, refdata_error_handler, validation_error_handler
from app.routers import auth, health, master, reference, screens, uploads
from app.services.transfer_dispatcher import verify_transfer_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    On startup every configured transfer routine name is checked against the
    registered append routines; a mismatch stops the server from starting.
    """
    configure_logging()
    logger.info("Starting %s...", settings.APP_NAME)
    await verify_transfer_registry(async_session_maker)

    yield

    logger.info("Shutting down %s...", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="Back-office API for roaming reference data and versioned dataset uploads",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.debug(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - start) * 1000,
    )
    return response


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    return await refdata_error_handler(request, PersistenceError(str(exc)))


app.add_exception_handler(RefDataError, refdata_error_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)


app.include_router(health.router, tags=["Health"])
app.include_router(auth.router)
app.include_router(uploads.router)
app.include_router(reference.router)
app.include_router(master.router)
app.include_router(screens.router)
