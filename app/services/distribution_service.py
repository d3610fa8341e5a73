"""
app/services/distribution_service.py

Derived metrics for one TrackAggregation: top selections, distribution
shares, monthly amounts and per-stream rates.

All arithmetic stays in Decimal; values are only converted to float after
half-up rounding, for the JSONB payloads.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from app.domain.money import ZERO, divide, quantize, to_rounded_float
from app.domain.royalty_summary import BreakdownEntry, TopItem, TrackAggregation, TrackMetrics


def top_item(breakdown: Mapping[str, BreakdownEntry]) -> TopItem | None:
    """
    Entry with the strictly greatest revenue.

    Ties keep the first-seen label. Returns None when the breakdown is empty
    or no entry has positive revenue.
    """

    best: TopItem | None = None
    best_revenue = ZERO
    for label, entry in breakdown.items():
        if entry.revenue > best_revenue:
            best = TopItem(key=label, revenue=entry.revenue)
            best_revenue = entry.revenue
    return best


def distribution(
    breakdown: Mapping[str, BreakdownEntry],
    total_net: Decimal,
    places: int,
) -> dict[str, float]:
    """
    Share of ``total_net`` per label; empty when ``total_net`` is zero.
    """

    if total_net == 0:
        return {}
    return {
        label: to_rounded_float(divide(entry.revenue, total_net), places)
        for label, entry in breakdown.items()
    }


def monthly_breakdown(months: Mapping[str, BreakdownEntry], places: int) -> dict[str, float]:
    return {label: to_rounded_float(entry.revenue, places) for label, entry in months.items()}


class DistributionCalculator:
    """
    Computes TrackMetrics with configurable rounding.

    distribution_places applies to platform/territory shares, monthly_places
    to monthly amounts and amount_places to the per-stream rates.
    """

    def __init__(
        self,
        *,
        distribution_places: int = 6,
        monthly_places: int = 2,
        amount_places: int = 10,
    ) -> None:
        self.distribution_places = distribution_places
        self.monthly_places = monthly_places
        self.amount_places = amount_places

    def compute(self, aggregation: TrackAggregation) -> TrackMetrics:
        streams = aggregation.total_streams
        if streams > 0:
            avg_per_stream = divide(aggregation.total_net, streams)
            revenue_per_play = divide(aggregation.total_revenue, streams)
        else:
            avg_per_stream = ZERO
            revenue_per_play = ZERO

        return TrackMetrics(
            avg_per_stream=quantize(avg_per_stream, self.amount_places),
            revenue_per_play=quantize(revenue_per_play, self.amount_places),
            top_territory=top_item(aggregation.territories),
            top_platform=top_item(aggregation.platforms),
            platform_distribution=distribution(
                aggregation.platforms,
                aggregation.total_net,
                self.distribution_places,
            ),
            territory_distribution=distribution(
                aggregation.territories,
                aggregation.total_net,
                self.distribution_places,
            ),
            monthly_breakdown=monthly_breakdown(aggregation.months, self.monthly_places),
        )
