"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from app.config import settings
from app.database import database
from app.routers import time_entries, timesheets
from app.utils.logging import configure_logging, get_logger

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    configure_logging(settings.log_level, settings.json_logs)
    await database.connect()
    yield
    # Shutdown
    await database.disconnect()


app = FastAPI(
    title="Timesheet Service API",
    description="Workforce timesheets: time entries, conflicts and weekly totals",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(time_entries.router)
app.include_router(timesheets.router)


@app.exception_handler(PyMongoError)
async def store_unavailable(request: Request, exc: PyMongoError):
    """Report store failures as retryable."""
    log.error("store_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Time entry store unavailable, retry later"},
        headers={"Retry-After": "5"},
    )


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"status": "ok", "message": "Timesheet Service API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
