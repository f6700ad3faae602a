"""
Summary Cards

Collapses a report table into one headline value per metric and compares it
with the immediately preceding period of the same length.
"""

from datetime import timedelta
from typing import List, Optional, Tuple

import polars as pl

from src.analytics.catalog import MetricType
from src.analytics.errors import MalformedRequest
from src.analytics.schemas import MetricSummary, QueryParameters, RunReportResponse


def previous_period(params: QueryParameters) -> QueryParameters:
    """
    Same query shifted to the period that ends the day before ``start_date``.

    Raises:
        MalformedRequest: The previous period would start before ``date.min``
    """
    span = params.end_date - params.start_date
    try:
        prev_end = params.start_date - timedelta(days=1)
        prev_start = prev_end - span
    except OverflowError as e:
        raise MalformedRequest("startDate leaves no previous period to compare with") from e
    return params.model_copy(update={"start_date": prev_start, "end_date": prev_end})


def table_to_frame(table: RunReportResponse) -> pl.DataFrame:
    """
    Metric values as a float frame, one column per metric position.

    Columns are named ``m0``, ``m1``... so that a metric requested twice
    does not collide.
    """
    columns = [f"m{i}" for i in range(len(table.metric_headers))]
    data = {
        column: [float(row.metric_values[i].value) for row in table.rows]
        for i, column in enumerate(columns)
    }
    return pl.DataFrame(data, schema={column: pl.Float64 for column in columns})


def aggregate(table: RunReportResponse) -> List[Tuple[str, MetricType, Optional[float]]]:
    """Sum INTEGER metrics, average FLOAT and TIME metrics. No rows means no value."""
    frame = table_to_frame(table)
    if not frame.columns:
        return []
    if frame.is_empty():
        return [(header.name, header.type, None) for header in table.metric_headers]

    expressions = []
    for i, header in enumerate(table.metric_headers):
        column = pl.col(f"m{i}")
        expressions.append(column.sum() if header.type == MetricType.INTEGER else column.mean())

    totals = frame.select(expressions).row(0)
    results = []
    for header, total in zip(table.metric_headers, totals):
        value = None if total is None else round(float(total), 2)
        results.append((header.name, header.type, value))
    return results


def percent_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    if current is None or not previous:
        return None
    return round((current - previous) / previous * 100, 1)


def summarize(current: RunReportResponse, previous: RunReportResponse) -> List[MetricSummary]:
    """Pair each metric of ``current`` with the same position in ``previous``."""
    summaries = []
    for (name, metric_type, value), (_, _, prev_value) in zip(aggregate(current), aggregate(previous)):
        summaries.append(
            MetricSummary(
                name=name,
                type=metric_type,
                value=value,
                previous_value=prev_value,
                change=percent_change(value, prev_value),
            )
        )
    return summaries
