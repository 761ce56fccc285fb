"""
Import-related Pydantic schemas.

This module contains the response schema for lead workbook extraction.
"""

from typing import Dict, Optional
from pydantic import BaseModel, Field


class ExtractionResultResponse(BaseModel):
    """Summary of a completed extraction."""
    
    document_id: Optional[int] = Field(None, description="ID of the stored document")
    leads: int = Field(..., description="Leads imported from BASE")
    facts: Dict[str, int] = Field(default_factory=dict, description="Dimensional facts per kind")
    
    class Config:
        json_schema_extra = {
            "example": {
                "document_id": 7,
                "leads": 1250,
                "facts": {
                    "market": 1302,
                    "source": 1250,
                    "location": 1190,
                    "size": 1201,
                    "objective": 980
                }
            }
        }
