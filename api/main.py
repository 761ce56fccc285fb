"""
FastAPI application for the lead import system.

This module creates and configures the FastAPI application, registering
all routers, middleware and exception handlers.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from api.config import settings
from api.dependencies import engine, SessionLocal
from api.routers import analytics_router, etl_router
from api.schemas.common import ErrorResponse, HealthCheckResponse
from backend.models.schema import Base
from services.exceptions import InputRejectedError, WorkbookReadError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT,
    handlers=[
        logging.FileHandler(settings.LOG_FILE),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.API_TITLE} v{settings.API_VERSION}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[-1]}")  # Hide credentials

    # Ensure database tables exist
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables verified")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    yield

    # Shutdown
    logger.info("Shutting down application")


# Create FastAPI application
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS
)


# Exception handlers

@app.exception_handler(InputRejectedError)
async def input_rejected_handler(request: Request, exc: InputRejectedError):
    """Handle invalid workbooks (missing sheet/column, bad date, unknown lead)."""
    logger.warning(f"Rejected input on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error=str(exc),
            detail={"type": type(exc).__name__},
            path=str(request.url)
        ).model_dump(mode='json')
    )


@app.exception_handler(WorkbookReadError)
async def workbook_read_handler(request: Request, exc: WorkbookReadError):
    """Handle files that cannot be opened as a workbook."""
    logger.warning(f"Unreadable workbook on {request.url.path}: {exc.__cause__}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error=str(exc),
            detail={"reason": str(exc.__cause__)} if settings.DEBUG else None,
            path=str(request.url)
        ).model_dump(mode='json')
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail={"message": str(exc)} if settings.DEBUG else None,
            path=str(request.url)
        ).model_dump(mode='json')
    )


# Register routers with API prefix
app.include_router(etl_router.router, prefix=settings.API_PREFIX)
app.include_router(analytics_router.router, prefix=settings.API_PREFIX)


# Root endpoints

@app.get('/', include_in_schema=False)
async def root():
    """
    Root endpoint - redirect to docs.
    """
    return {
        'message': f'Welcome to {settings.API_TITLE}',
        'version': settings.API_VERSION,
        'docs': '/docs',
        'redoc': '/redoc',
        'openapi': '/openapi.json'
    }


@app.get('/health', response_model=HealthCheckResponse, tags=['health'])
async def health_check():
    """
    Health check endpoint.

    Checks database connectivity.

    **Example:**
    ```bash
    curl http://localhost:8000/health
    ```
    """
    health_status = {
        'status': 'healthy',
        'timestamp': datetime.utcnow(),
        'version': settings.API_VERSION,
        'database': 'unknown'
    }

    try:
        with SessionLocal() as session:
            session.execute(text('SELECT 1'))
        health_status['database'] = 'connected'
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status['database'] = 'disconnected'
        health_status['status'] = 'unhealthy'

    return HealthCheckResponse(**health_status)


@app.get('/api/ping', tags=['health'])
async def ping():
    """
    Simple ping endpoint for load balancers.

    **Returns:**
    ```json
    {"ping": "pong"}
    ```
    """
    return {'ping': 'pong'}


# Middleware for request logging

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests."""
    logger.info(f"{request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} - {response.status_code}")
    return response


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(
        'api.main:app',
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
