"""
Report value models for the marketing analytics engine.

These are transient, immutable values. Nothing here is persisted.
"""

from enum import Enum
from datetime import datetime
from typing import Dict, List
from pydantic import BaseModel, Field


class AnalysisStatus(str, Enum):
    """Performance of a group relative to the global conversion rate."""
    ABOVE_AVERAGE = 'ABOVE_AVERAGE'
    BELOW_AVERAGE = 'BELOW_AVERAGE'
    INCONCLUSIVE = 'INCONCLUSIVE'


class DimensionStat(BaseModel):
    """Raw counts for one category, as returned by the aggregation port."""

    category_name: str = Field(..., description="Category label, e.g. market name")
    total_leads: int = Field(..., ge=0, description="Leads in the category")
    total_sold: int = Field(..., ge=0, description="Sold leads in the category")

    class Config:
        frozen = True


class AnalysisGroup(BaseModel):
    """One classified entry of a dimension ranking."""

    group_name: str = Field(..., description="Category label")
    total_leads: int = Field(..., description="Leads in the group")
    total_sold: int = Field(..., description="Sold leads in the group")
    conversion_rate: float = Field(..., ge=0.0, le=100.0, description="Percentage, 2 decimals")
    status: AnalysisStatus = Field(..., description="Classification against the baseline")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "group_name": "Tecnologia",
                "total_leads": 50,
                "total_sold": 15,
                "conversion_rate": 30.0,
                "status": "ABOVE_AVERAGE"
            }
        }


class GlobalStats(BaseModel):
    """Totals over every lead in the store."""

    total_leads: int
    total_sales: int
    overall_conversion_rate: float

    class Config:
        frozen = True


class DimensionAnalysis(BaseModel):
    """Ranked groups of one dimension."""

    dimension: str = Field(..., description="Dimension label, e.g. MERCADO")
    description: str = Field(..., description="Human readable title")
    ranking: List[AnalysisGroup] = Field(default_factory=list)

    class Config:
        frozen = True


class MarketingReport(BaseModel):
    """Comparative performance report across dimensions."""

    report_id: str = Field(..., description="Unique report token")
    generated_at: datetime = Field(..., description="Generation timestamp")
    global_stats: GlobalStats
    analyses: List[DimensionAnalysis] = Field(default_factory=list)
    top_insights: Dict[str, str] = Field(
        default_factory=dict,
        description="Headline per dimension label"
    )

    class Config:
        frozen = True
