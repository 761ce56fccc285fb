"""
Aggregation Service - Raw lead and sale counts for the analytics engine.

AggregationPort is the read boundary the report engine depends on;
SqlAlchemyAggregationAdapter answers it with GROUP BY queries over the
imported lead graph.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from backend.models.schema import Lead, Market, Source, Location, Size
from backend.models.report import DimensionStat

logger = logging.getLogger(__name__)


class AggregationPort(ABC):
    """Read-only source of raw counts per dimension."""

    @abstractmethod
    def count_total_leads(self) -> int:
        """Total number of leads."""

    @abstractmethod
    def count_total_sold(self) -> int:
        """Number of leads flagged as sold."""

    @abstractmethod
    def stats_by_market(self) -> List[DimensionStat]:
        """Lead and sale counts per market name."""

    @abstractmethod
    def stats_by_source(self) -> List[DimensionStat]:
        """Lead and sale counts per source name."""

    def stats_by_location(self) -> List[DimensionStat]:
        """Lead and sale counts per location name."""
        raise NotImplementedError

    def stats_by_size(self) -> List[DimensionStat]:
        """Lead and sale counts per size range."""
        raise NotImplementedError


class SqlAlchemyAggregationAdapter(AggregationPort):
    """
    AggregationPort over the SQLAlchemy lead schema.

    A lead with several facts of the same dimension is counted once per fact,
    and every group list is ordered by category name.
    """

    def __init__(self, db_session: Session):
        self.session = db_session

    def count_total_leads(self) -> int:
        return self.session.query(func.count(Lead.id)).scalar() or 0

    def count_total_sold(self) -> int:
        return self.session.query(func.count(Lead.id)).filter(
            Lead.sold == True
        ).scalar() or 0

    def stats_by_market(self) -> List[DimensionStat]:
        return self._stats_by(Market.name, Market.lead_id)

    def stats_by_source(self) -> List[DimensionStat]:
        return self._stats_by(Source.name, Source.lead_id)

    def stats_by_location(self) -> List[DimensionStat]:
        return self._stats_by(Location.name, Location.lead_id)

    def stats_by_size(self) -> List[DimensionStat]:
        return self._stats_by(Size.size_range, Size.lead_id)

    def _stats_by(self, category_column, lead_fk_column) -> List[DimensionStat]:
        """Group facts by a category column and count their leads and sales."""
        sold_count = func.sum(case((Lead.sold == True, 1), else_=0))

        rows = self.session.query(
            category_column,
            func.count(Lead.id),
            sold_count
        ).join(
            Lead, lead_fk_column == Lead.id
        ).group_by(
            category_column
        ).order_by(
            category_column
        ).all()

        stats = [
            DimensionStat(
                category_name=name,
                total_leads=int(total or 0),
                total_sold=int(sold or 0)
            )
            for name, total, sold in rows
        ]
        logger.debug(f"Aggregated {len(stats)} groups by {category_column}")
        return stats
