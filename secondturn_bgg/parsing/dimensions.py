"""
Dimension and weight conversion for BGG version data.

BGG stores box sizes in inches and weights in pounds; the marketplace shows
metric values.
"""

import math
import re
from typing import NamedTuple, Optional

from ..models import DimensionInfo, WeightInfo

_NUMBER = re.compile(r'(\d+(?:\.\d+)?)')
_METRIC_LENGTH = re.compile(r'(?<![a-z])(cm|mm|m)(?![a-z])', re.IGNORECASE)
_METRIC_WEIGHT = re.compile(r'(?<![a-z])(kg|g)(?![a-z])', re.IGNORECASE)


class Measurement(NamedTuple):
    imperial: str
    metric: str
    raw_value: Optional[float]


def _round_one_decimal(value: float) -> float:
    # half-up rounding, like a price tag would show it
    return math.floor(value * 10 + 0.5) / 10


def format_number(value: float) -> str:
    """Render 30.0 as "30" and 31.8 as "31.8"."""
    if value == int(value):
        return str(int(value))
    return str(value)


def inches_to_cm(inches: float) -> float:
    return _round_one_decimal(inches * 2.54)


def lbs_to_kg(pounds: float) -> float:
    return _round_one_decimal(pounds * 0.453592)


def _parse_number(text: str) -> Optional[float]:
    match = _NUMBER.search(text)
    if not match:
        return None
    return float(match.group(1))


def parse_and_convert_dimension(dimension: str) -> Measurement:
    """
    Convert a dimension string to metric.

    Handles "12.5", "12.5 in", "12.5\"". Strings that already carry a metric
    unit (cm, mm, m) are passed through unchanged.
    """
    if not dimension or not dimension.strip():
        return Measurement('', '', None)

    value = _parse_number(dimension)
    if value is None:
        return Measurement(dimension, dimension, None)

    if _METRIC_LENGTH.search(dimension):
        return Measurement(dimension, dimension, value)

    return Measurement(
        f'{format_number(value)}"',
        f'{format_number(inches_to_cm(value))} cm',
        value,
    )


def parse_and_convert_weight(weight: str) -> Measurement:
    """
    Convert a weight string to metric.

    Handles "2.5", "2.5 lbs", "2.5 pounds". Strings that already carry a
    metric unit (kg, g) are passed through unchanged.
    """
    if not weight or not weight.strip():
        return Measurement('', '', None)

    value = _parse_number(weight)
    if value is None:
        return Measurement(weight, weight, None)

    if _METRIC_WEIGHT.search(weight):
        return Measurement(weight, weight, value)

    return Measurement(
        f'{format_number(value)} lbs',
        f'{format_number(lbs_to_kg(value))} kg',
        value,
    )


def format_dimensions(width: str, length: str, depth: str) -> DimensionInfo:
    """Build the "W: x cm × L: y cm × D: z cm" display from whichever parts are present."""
    imperial_parts = []
    metric_parts = []

    for label, raw in (('W', width), ('L', length), ('D', depth)):
        measurement = parse_and_convert_dimension(raw)
        # BGG reports unknown box sizes as 0
        if not measurement.raw_value:
            continue
        imperial_parts.append(f'{label}: {measurement.imperial}')
        metric_parts.append(f'{label}: {measurement.metric}')

    if not metric_parts:
        return DimensionInfo()

    return DimensionInfo(
        metric=' × '.join(metric_parts),
        imperial=' × '.join(imperial_parts),
        has_dimensions=True,
    )


def weight_info(weight: str) -> WeightInfo:
    measurement = parse_and_convert_weight(weight)
    return WeightInfo(
        metric=measurement.metric,
        imperial=measurement.imperial,
        raw_value=measurement.raw_value,
    )
