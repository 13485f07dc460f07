"""
FastAPI application bootstrap with: \n
- Lifespan-managed database wiring (session factory + schema creation) \n
- CORS configured for the frontend \n
- Exception handlers mapping service error kinds to HTTP status codes \n

Environment contract (from `settings`): \n
- DB_URL: database the session factory binds to (unless already configured). \n
- FRONTEND_URL: allowed CORS origin. \n
- LOG_LEVEL: root logging level. \n
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from condo_parcels.api.fast_api import router
from condo_parcels.database.config.config import settings
from condo_parcels.database.config.connection_engine import init_db
from condo_parcels.database.core.errors import DomainError, ErrorKind, from_integrity_error
from condo_parcels.database.helpers.transactionManagement import get_session_factory

logging.basicConfig(level=settings.LOG_LEVEL)

logger = logging.getLogger("uvicorn")
"""Logger instance for capturing and emitting Uvicorn server logs."""

STATUS_BY_KIND = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    App lifespan manager.

    Notes
    ------------
    - On startup (before yielding): bind the session factory (from DB_URL when
      nothing configured it yet) and create missing tables.
    - On shutdown (after yielding): dispose the engine's connection pool.
    """
    engine = get_session_factory().kw["bind"]
    logger.info("Preparing database schema on %s", engine.url.render_as_string(hide_password=True))
    init_db(engine)
    try:
        yield
    finally:
        engine.dispose()
        logger.info("Database connections released.")


# Instantiate the FastAPI app with lifespan handler
app = FastAPI(title="Condo Parcels", lifespan=lifespan)
"""Instantiates the FastAPI application object with the database lifespan handler."""

# -----------------------
# CORS configuration
# -----------------------
url = settings.FRONTEND_URL
"""The allowed frontend origin (URL) used for CORS configuration."""

app.add_middleware(
    CORSMiddleware,
    allow_origins=[url],      # Frontend origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------
# Error mapping
# -----------------------
def _error_response(kind: ErrorKind, detail: str) -> JSONResponse:
    return JSONResponse(status_code=STATUS_BY_KIND[kind], content={"kind": kind.value, "detail": detail})


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return _error_response(exc.kind, exc.detail)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value").removeprefix("Value error, ")
        messages.append(f"{field}: {message}" if field else message)
    return _error_response(ErrorKind.VALIDATION_ERROR, "; ".join(messages) or "Invalid request")


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    error = from_integrity_error(exc)
    return _error_response(error.kind, error.detail)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(ErrorKind.INTERNAL, "Internal server error")


# -----------------------
# API routes
# -----------------------
app.include_router(router)


@app.get("/health")
def health():
    return {"status": "ok"}
