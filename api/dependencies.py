"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for database sessions,
upload validation, and the service objects used by the routers.
"""

import logging
from pathlib import Path
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi import Depends, HTTPException, status

from api.config import settings
from services.aggregation_service import SqlAlchemyAggregationAdapter
from services.analytics_service import AnalyticsService
from services.extraction_service import ExtractionService
from services.persistence_service import SqlAlchemyLeadStore

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """
    Create a database engine for a URL.

    SQLite URLs get a thread-shareable connection and no pool sizing;
    server databases get the configured pool.
    """
    if database_url.startswith('sqlite'):
        return create_engine(
            database_url,
            connect_args={'check_same_thread': False},
            echo=settings.DEBUG
        )

    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        echo=settings.DEBUG
    )


# Create database engine
engine = build_engine(settings.DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields database session and ensures it's closed after use.

    Usage:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            # Use db session
            pass
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_extraction_service(db: Session = Depends(get_db)) -> ExtractionService:
    """Extraction service writing to the request's session."""
    return ExtractionService(SqlAlchemyLeadStore(db))


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """Analytics service reading from the request's session."""
    return AnalyticsService(
        SqlAlchemyAggregationAdapter(db),
        threshold=settings.STATISTICAL_THRESHOLD,
        dimensions=settings.REPORT_DIMENSIONS
    )


def verify_file_size(file_size: int) -> bool:
    """
    Verify uploaded file size is within limit.

    Args:
        file_size: File size in bytes

    Returns:
        True if size is acceptable

    Raises:
        HTTPException: If file is too large
    """
    max_size_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024

    if file_size > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size ({file_size / 1024 / 1024:.1f} MB) exceeds maximum allowed "
                   f"({settings.MAX_FILE_SIZE_MB} MB)"
        )

    return True


def verify_filename(filename: str) -> bool:
    """
    Verify an uploaded filename is a plain name with an allowed extension.

    Args:
        filename: Name of uploaded file

    Returns:
        True if the name is acceptable

    Raises:
        HTTPException: If the name is blank, contains a path, or has a
                       disallowed extension
    """
    if not filename or not filename.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required"
        )

    normalized = filename.replace('\\', '/')
    if '..' in normalized or '/' in normalized:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid filename: '{filename}'"
        )

    ext = Path(normalized).suffix.lower()

    if ext not in [e.lower() for e in settings.ALLOWED_EXTENSIONS]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File extension '{ext}' not allowed. "
                   f"Allowed extensions: {', '.join(settings.ALLOWED_EXTENSIONS)}"
        )

    return True
