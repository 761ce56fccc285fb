"""Models package for the lead import system."""
from backend.models.schema import (
    Base, Document, Lead, Market, Source, Location, Size, Objective
)
from backend.models.report import (
    AnalysisStatus, DimensionStat, AnalysisGroup, GlobalStats,
    DimensionAnalysis, MarketingReport
)

__all__ = [
    'Base', 'Document', 'Lead', 'Market', 'Source', 'Location', 'Size', 'Objective',
    'AnalysisStatus', 'DimensionStat', 'AnalysisGroup', 'GlobalStats',
    'DimensionAnalysis', 'MarketingReport',
]
