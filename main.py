import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment-specific .env file BEFORE any app imports
env = os.getenv("ENV", "local")
dotenv_file = f".env.{env}"
load_dotenv(dotenv_file)

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.db import get_db
from checkin.middleware import PerformanceMiddleware
from checkin.utils import (
    logger,
    configure_sentry,
    is_debug,
    API_PREFIX,
    API_VERSION,
)
from checkin.utils.errors import AppError, InternalError
from checkin.utils.response_utils import app_error_response, validation_error
from checkin.utils.sentry_utils import capture_exception
from checkin.routers import (
    auth_router,
    admin_users_router,
    admin_records_router,
    submissions_router,
    votes_router,
    ledger_router,
)
from checkin.services.scheduler import scheduler_service

# Initialize Sentry for error tracking (only in non-debug environments)
sentry_enabled = configure_sentry()
if sentry_enabled:
    logger.info("Sentry error tracking initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    await scheduler_service.start()

    yield

    await scheduler_service.stop()


app = FastAPI(
    title="Check-in Backend",
    description="Daily attendance submissions and votes with role-gated account administration",
    version="0.1.0",
    docs_url=None if not is_debug() else "/docs",
    redoc_url=None,
    lifespan=lifespan,
)

# CORS configuration - allow all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Performance monitoring middleware
app.add_middleware(PerformanceMiddleware)

# Register routers
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(ledger_router, prefix=API_PREFIX)
app.include_router(submissions_router, prefix=API_PREFIX)
app.include_router(votes_router, prefix=API_PREFIX)
app.include_router(admin_users_router, prefix=API_PREFIX)
app.include_router(admin_records_router, prefix=API_PREFIX)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render domain errors with their code and status."""
    return app_error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed query, path or body parameters are plain validation errors."""
    fields = sorted(
        {".".join(str(part) for part in err["loc"] if part != "body") for err in exc.errors()}
        - {""}
    )
    message = "Missing or invalid fields: " + ", ".join(fields) if fields else "Invalid request body"
    return validation_error(
        message,
        details={"fields": fields},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(
        f"Unhandled exception: {exc.__class__.__name__}: {exc}",
        exc_info=True,
    )

    # Capture exception to Sentry
    capture_exception(exc)

    return app_error_response(InternalError())


@app.get("/")
async def root():
    return {"message": "Welcome to Check-in Backend API", "version": "0.1.0", "api": API_VERSION}


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"

    return {
        "status": "healthy",
        "database": db_status,
        "scheduler": "running" if scheduler_service.running else "stopped",
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting Check-in Backend (env={env}, debug={is_debug()})")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=is_debug())
