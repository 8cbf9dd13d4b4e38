"""
Main FastAPI application
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import json
import logging
import time

from frontdesk.config.database import db_config
from frontdesk.config.settings import settings

from frontdesk.routes import (
    rooms,
    guests,
    bookings,
    compliance,
    dashboard,
    reports,
    waiting_list,
    storage,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events"""
    # Startup
    await db_config.connect_db()
    logger.info("🚀 %s v%s started", settings.APP_NAME, settings.VERSION)
    yield
    # Shutdown
    await db_config.close_db()
    logger.info("👋 Application shutdown")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Round-trip through json with default=str to handle non-serializable objects (e.g. ValueError)
    safe_errors = json.loads(json.dumps(exc.errors(), default=str))
    logger.warning(
        "❌ 422 VALIDATION ERROR on %s %s: %s",
        request.method, request.url.path, json.dumps(safe_errors),
    )
    return JSONResponse(status_code=422, content={"detail": safe_errors})

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    logger.info("%s %s - %s (%.2fs)", request.method, request.url.path, response.status_code, duration)
    return response

# Include routers
app.include_router(rooms.router, prefix="/api")
app.include_router(guests.router, prefix="/api")
app.include_router(bookings.router, prefix="/api")
app.include_router(compliance.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(reports.router, prefix="/api")
app.include_router(waiting_list.router, prefix="/api")
app.include_router(storage.router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "app": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "running"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}
