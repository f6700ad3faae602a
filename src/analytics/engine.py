"""
Synthetic Metrics Engine

Generates GA4-shaped report tables without calling Google. Rows follow the
primary dimension of the query:

- "date" anywhere in the dimensions: one row per day of the range
- first dimension categorical (source, channel, country, device, browser):
  one row per category, in catalog order
- anything else: no rows

Metric values are drawn per row and per metric from the ranges in the
catalog, scaled by a single factor derived from the filters.
"""

import math
import random
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import structlog

from src.analytics.catalog import (
    CATEGORICAL_DIMENSIONS,
    DATE_DIMENSION,
    FILTER_EFFECTS,
    METRIC_SPECS,
    MONTH_DIMENSION,
    UNKNOWN_METRIC_VALUE,
    WEEK_DIMENSION,
    categories_for,
    metric_type_for,
)
from src.analytics.schemas import (
    DimensionHeader,
    DimensionValue,
    MetricHeader,
    MetricValue,
    QueryFilters,
    QueryParameters,
    ReportRow,
    RunReportResponse,
)

logger = structlog.get_logger(__name__)


def filter_factor(filters: Optional[Dict[str, Any]]) -> float:
    """
    Multiplicative factor applied to count metrics.

    Effects are checked in catalog order and a later match replaces an
    earlier one: with both ``country=France`` and ``device=mobile`` the
    factor is 0.8, not 0.96.
    """
    typed = QueryFilters.from_mapping(filters)
    factor = 1.0
    for key, value, effect in FILTER_EFFECTS:
        if getattr(typed, key) == value:
            factor = effect
    return factor


def inclusive_day_count(start_date: date, end_date: date) -> int:
    return (end_date - start_date).days + 1


def week_label(day_index: int) -> str:
    """Label of the 1-based day index within the range, e.g. day 8 -> "Week 2"."""
    return f"Week {math.ceil(day_index / 7)}"


class SyntheticMetricsEngine:
    """
    Report generator backed by a pseudo random source.

    Pass a seeded ``random.Random`` for reproducible output.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, params: QueryParameters) -> RunReportResponse:
        """Build the report table for resolved query parameters."""
        factor = filter_factor(params.filters)

        if DATE_DIMENSION in params.dimensions:
            rows = self._date_rows(params, factor)
        elif params.dimensions and params.dimensions[0] in CATEGORICAL_DIMENSIONS:
            rows = self._category_rows(params, factor)
        else:
            logger.info(
                "No row strategy for primary dimension",
                dimensions=params.dimensions,
            )
            rows = []

        return RunReportResponse(
            dimension_headers=[DimensionHeader(name=d) for d in params.dimensions],
            metric_headers=[
                MetricHeader(name=m, type=metric_type_for(m)) for m in params.metrics
            ],
            rows=rows,
        )

    # -------------------------------------------------------------------------
    # Row strategies
    # -------------------------------------------------------------------------

    def _date_rows(self, params: QueryParameters, factor: float) -> List[ReportRow]:
        rows = []
        days = inclusive_day_count(params.start_date, params.end_date)

        for offset in range(days):
            current = params.start_date + timedelta(days=offset)
            metric_values = self._metric_values(params.metrics, factor)

            dimension_values = []
            for dimension in params.dimensions:
                if dimension == DATE_DIMENSION:
                    value = current.isoformat()
                elif dimension == WEEK_DIMENSION:
                    value = week_label(offset + 1)
                elif dimension == MONTH_DIMENSION:
                    value = current.strftime("%B")
                else:
                    value = self._random_category(dimension)
                dimension_values.append(DimensionValue(value=value))

            rows.append(ReportRow(dimension_values=dimension_values, metric_values=metric_values))

        return rows

    def _category_rows(self, params: QueryParameters, factor: float) -> List[ReportRow]:
        rows = []
        primary = params.dimensions[0]

        for category in categories_for(primary):
            metric_values = self._metric_values(params.metrics, factor)
            dimension_values = [DimensionValue(value=category)]
            dimension_values.extend(
                DimensionValue(value=self._random_category(d)) for d in params.dimensions[1:]
            )
            rows.append(ReportRow(dimension_values=dimension_values, metric_values=metric_values))

        return rows

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------

    def _random_category(self, dimension: str) -> str:
        return self.rng.choice(categories_for(dimension))

    def _metric_values(self, metrics: List[str], factor: float) -> List[MetricValue]:
        return [MetricValue(value=self.metric_value(metric, factor)) for metric in metrics]

    def metric_value(self, metric: str, factor: float = 1.0) -> str:
        """Draw one rendered value for ``metric``."""
        spec = METRIC_SPECS.get(metric)
        if spec is None:
            return UNKNOWN_METRIC_VALUE

        # low + random() keeps the draw inside [low, high)
        raw = spec.low + self.rng.random() * (spec.high - spec.low)

        if spec.decimals:
            return f"{raw:.{spec.decimals}f}"
        if spec.scaled:
            raw *= factor
        return str(math.floor(raw))
