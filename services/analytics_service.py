"""
Analytics Service - Rank and classify lead groups against the global rate.

Raw counts from an AggregationPort become conversion rates, every group is
classified against the global conversion rate (the baseline), groups are
ranked per dimension, and the best performer of each dimension becomes a
headline insight.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from backend.models.report import (
    AnalysisGroup, AnalysisStatus, DimensionAnalysis, DimensionStat,
    GlobalStats, MarketingReport
)
from services.aggregation_service import AggregationPort

logger = logging.getLogger(__name__)

# Minimum number of leads for a group to be compared against the baseline
DEFAULT_STATISTICAL_THRESHOLD = 10

# Dimension label -> (description, AggregationPort method)
DIMENSIONS = {
    'MERCADO': ('Performance por segmento', 'stats_by_market'),
    'ORIGEM': ('Performance por canal', 'stats_by_source'),
    'LOCAL': ('Performance por localidade', 'stats_by_location'),
    'PORTE': ('Performance por porte', 'stats_by_size'),
}
DEFAULT_DIMENSIONS = ('MERCADO', 'ORIGEM')

_RATIO_SCALE = Decimal('0.0001')
_RATE_SCALE = Decimal('0.01')


def port_supports(port: AggregationPort, method: str) -> bool:
    """True when the port overrides the optional stats method of AggregationPort."""
    return getattr(type(port), method) is not getattr(AggregationPort, method)


def global_conversion_rate(total_leads: int, total_sold: int) -> float:
    """Unrounded percentage of sold leads; 0.0 when there are no leads."""
    if total_leads == 0:
        return 0.0
    return total_sold / total_leads * 100


def conversion_rate(total_leads: int, total_sold: int) -> float:
    """
    Percentage of sold leads with two decimals.

    The ratio is rounded half-up to 4 places before scaling to a percentage,
    then rounded half-up again to 2 places, all in Decimal.

    Example: 1 of 3 leads -> 0.3333 -> 33.33
    """
    if total_leads == 0:
        return 0.0
    ratio = (Decimal(total_sold) / Decimal(total_leads)).quantize(_RATIO_SCALE, rounding=ROUND_HALF_UP)
    return float((ratio * 100).quantize(_RATE_SCALE, rounding=ROUND_HALF_UP))


def classify(
    group_name: str,
    total_leads: int,
    total_sold: int,
    threshold: int = DEFAULT_STATISTICAL_THRESHOLD,
    global_average: float = 0.0
) -> AnalysisGroup:
    """
    Build the classified group for one category.

    Groups below the threshold are INCONCLUSIVE whatever their rate;
    the others are ABOVE_AVERAGE when their rate reaches the baseline.

    Raises:
        ValueError: If counts are negative or sales exceed leads
    """
    if total_leads < 0 or total_sold < 0:
        raise ValueError(f"Counts must be non-negative: leads={total_leads}, sold={total_sold}")
    if total_sold > total_leads:
        raise ValueError(f"Sold count exceeds lead count for '{group_name}': "
                         f"{total_sold} > {total_leads}")

    rate = conversion_rate(total_leads, total_sold)

    if total_leads < threshold:
        status = AnalysisStatus.INCONCLUSIVE
    elif rate >= global_average:
        status = AnalysisStatus.ABOVE_AVERAGE
    else:
        status = AnalysisStatus.BELOW_AVERAGE

    return AnalysisGroup(
        group_name=group_name,
        total_leads=total_leads,
        total_sold=total_sold,
        conversion_rate=rate,
        status=status
    )


def rank_dimension(
    raw_stats: Iterable[DimensionStat],
    threshold: int = DEFAULT_STATISTICAL_THRESHOLD,
    global_average: float = 0.0
) -> List[AnalysisGroup]:
    """
    Classify every category and order them best first.

    Order is conversion rate descending, then sales descending. Groups equal
    on both keep the order the aggregation port returned them in.
    """
    groups = [
        classify(stat.category_name, stat.total_leads, stat.total_sold, threshold, global_average)
        for stat in raw_stats
    ]
    return sorted(groups, key=lambda g: (-g.conversion_rate, -g.total_sold))


def derive_insight(ranking: Sequence[AnalysisGroup]) -> Optional[str]:
    """
    Headline for the best above-average group, e.g. 'Tecnologia (30.0%)'.

    Ties on the top rate go to the group with more sales, then to the one
    ranked first. Returns None when no group is above average.
    """
    candidates = [g for g in ranking if g.status == AnalysisStatus.ABOVE_AVERAGE]
    if not candidates:
        return None
    winner = max(candidates, key=lambda g: (g.conversion_rate, g.total_sold))
    return f"{winner.group_name} ({winner.conversion_rate}%)"


def build_report(
    total_leads: int,
    total_sales: int,
    dimensions: Sequence[Tuple[str, str, List[DimensionStat]]],
    threshold: int = DEFAULT_STATISTICAL_THRESHOLD,
    report_id: Optional[str] = None,
    generated_at: Optional[datetime] = None
) -> MarketingReport:
    """
    Assemble a report from raw counts.

    Args:
        total_leads: Total number of leads
        total_sales: Number of sold leads
        dimensions: (label, description, raw stats) per dimension, in report order
        threshold: Minimum group size for classification
        report_id: Report token (random UUID when omitted)
        generated_at: Generation time (now when omitted)
    """
    baseline = global_conversion_rate(total_leads, total_sales)

    analyses = []
    insights: Dict[str, str] = {}
    for label, description, raw_stats in dimensions:
        ranking = rank_dimension(raw_stats, threshold, baseline)
        analyses.append(DimensionAnalysis(
            dimension=label,
            description=description,
            ranking=ranking
        ))
        insight = derive_insight(ranking)
        if insight is not None:
            insights[label] = insight

    return MarketingReport(
        report_id=report_id or str(uuid.uuid4()),
        generated_at=generated_at or datetime.now(),
        global_stats=GlobalStats(
            total_leads=total_leads,
            total_sales=total_sales,
            overall_conversion_rate=baseline
        ),
        analyses=analyses,
        top_insights=insights
    )


class AnalyticsService:
    """
    Report generation over an AggregationPort.

    Each call reads the port twice (global totals, then per-dimension stats)
    and has no side effects.
    """

    def __init__(
        self,
        port: AggregationPort,
        threshold: int = DEFAULT_STATISTICAL_THRESHOLD,
        dimensions: Sequence[str] = DEFAULT_DIMENSIONS
    ):
        """
        Initialize analytics service.

        Args:
            port: Source of raw counts
            threshold: Minimum leads per group for a conclusive status (default: 10)
            dimensions: Dimension labels to rank, in report order

        Raises:
            ValueError: If a dimension label is unknown or the port cannot
                        aggregate it
        """
        unknown = [d for d in dimensions if d not in DIMENSIONS]
        if unknown:
            raise ValueError(f"Unknown report dimensions: {', '.join(unknown)}. "
                             f"Supported: {', '.join(DIMENSIONS)}")

        unsupported = [d for d in dimensions if not port_supports(port, DIMENSIONS[d][1])]
        if unsupported:
            raise ValueError(f"{type(port).__name__} cannot aggregate dimensions: "
                             f"{', '.join(unsupported)}")
        self.port = port
        self.threshold = threshold
        self.dimensions = tuple(dimensions)

    def generate_report(self) -> MarketingReport:
        """Build a fresh report snapshot."""
        total_leads = self.port.count_total_leads()
        total_sales = self.port.count_total_sold()
        logger.info(f"Baseline: {total_sales}/{total_leads} sold "
                    f"({global_conversion_rate(total_leads, total_sales):.2f}%)")

        dimensions = []
        for label in self.dimensions:
            description, method = DIMENSIONS[label]
            raw_stats = getattr(self.port, method)()
            logger.info(f"Dimension {label}: {len(raw_stats)} groups")
            dimensions.append((label, description, raw_stats))

        report = build_report(total_leads, total_sales, dimensions, self.threshold)
        logger.info(f"Generated report {report.report_id} with "
                    f"{len(report.top_insights)} insights")
        return report
