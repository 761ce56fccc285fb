"""
Analytics router - Marketing performance reports.
"""

import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_analytics_service
from backend.models.report import MarketingReport
from services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/v1/analytics', tags=['analytics'])


@router.get('/report', response_model=MarketingReport)
async def get_marketing_report(
    service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Generate the consolidated marketing report.
    
    Returns global totals, a ranking per configured dimension (market and
    source by default) and the best above-average group of each dimension.
    
    **Example:**
    ```bash
    curl http://localhost:8000/api/v1/analytics/report
    ```
    """
    return service.generate_report()
