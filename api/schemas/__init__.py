"""
Pydantic schemas for request/response validation.

This package contains the Pydantic models used for API responses.
Report bodies reuse the value models in backend.models.report.
"""

from api.schemas.common import ErrorResponse, HealthCheckResponse
from api.schemas.import_schema import ExtractionResultResponse

__all__ = [
    'ErrorResponse',
    'HealthCheckResponse',
    'ExtractionResultResponse',
]
