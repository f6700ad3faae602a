"""
Metric and Dimension Catalog

Fixed category lists, metric value ranges and filter effects used by the
synthetic metrics engine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


class MetricType(str, Enum):
    """Metric header type tags, as in the GA4 Data API"""
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    TIME = "TIME"


DATE_DIMENSION = "date"
WEEK_DIMENSION = "week"
MONTH_DIMENSION = "month"

DEFAULT_METRIC = "activeUsers"
DEFAULT_DIMENSION = DATE_DIMENSION

# Order matters: categorical rows are emitted in list order
DIMENSION_CATEGORIES: Dict[str, List[str]] = {
    "source": ["Google", "Direct", "Facebook", "Twitter", "Email", "Referral"],
    "channel": ["Organic Search", "Direct", "Social", "Email", "Referral", "Paid Search"],
    "country": ["France", "United States", "United Kingdom", "Germany", "Canada", "Spain"],
    "device": ["Desktop", "Mobile", "Tablet"],
    "browser": ["Chrome", "Safari", "Firefox", "Edge", "Opera"],
}

DEFAULT_CATEGORIES: List[str] = ["Category 1", "Category 2", "Category 3", "Category 4"]

CATEGORICAL_DIMENSIONS: Tuple[str, ...] = tuple(DIMENSION_CATEGORIES)


def categories_for(dimension: str) -> List[str]:
    """Category list for a dimension, falling back to the generic placeholders."""
    return DIMENSION_CATEGORIES.get(dimension, DEFAULT_CATEGORIES)


@dataclass(frozen=True)
class MetricSpec:
    """
    Value range and rendering for one synthetic metric.

    Values are drawn uniformly from ``[low, high)``. With ``decimals`` set the
    value is rendered with that many decimals, otherwise it is floored to an
    integer (after applying the filter factor when ``scaled``).
    """
    name: str
    low: float
    high: float
    metric_type: MetricType = MetricType.INTEGER
    scaled: bool = False
    decimals: int = 0
    label: str = ""


METRIC_SPECS: Dict[str, MetricSpec] = {
    spec.name: spec
    for spec in (
        MetricSpec("activeUsers", 100, 1100, scaled=True, label="Active users"),
        MetricSpec("newUsers", 50, 550, scaled=True, label="New users"),
        MetricSpec("sessions", 200, 1700, scaled=True, label="Sessions"),
        MetricSpec("pageviews", 500, 3500, scaled=True, label="Page views"),
        MetricSpec("bounceRate", 10, 80, MetricType.FLOAT, decimals=2, label="Bounce rate"),
        MetricSpec("avgSessionDuration", 60, 360, MetricType.TIME, label="Average session duration"),
        # GA4 reports pages/session as a plain number; keep the INTEGER tag
        MetricSpec("pagesPerSession", 1, 6, decimals=2, label="Pages per session"),
        MetricSpec("conversionRate", 1, 11, MetricType.FLOAT, decimals=2, label="Conversion rate"),
    )
}

UNKNOWN_METRIC_VALUE = "0"


def metric_type_for(metric: str) -> MetricType:
    """Header type tag for a metric name; unknown metrics are INTEGER."""
    spec = METRIC_SPECS.get(metric)
    return spec.metric_type if spec else MetricType.INTEGER


# Evaluated in order; a later match replaces the factor of an earlier one.
FILTER_EFFECTS: List[Tuple[str, str, float]] = [
    ("country", "France", 1.2),
    ("device", "mobile", 0.8),
]

RECOGNIZED_FILTER_KEYS: Tuple[str, ...] = tuple(dict.fromkeys(key for key, _, _ in FILTER_EFFECTS))

DIMENSION_LABELS: Dict[str, str] = {
    "date": "Date",
    "week": "Week",
    "month": "Month",
    "country": "Country",
    "city": "City",
    "device": "Device",
    "channel": "Channel",
    "source": "Source",
    "browser": "Browser",
    "operatingSystem": "Operating system",
    "page": "Page",
}
