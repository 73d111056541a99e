"""
Cost aggregation.

Azure prices one offer through several dimensions (per hour, per month,
per core and hour). They are summed into three buckets and normalized to a
monthly cost for a given core count.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

import structlog

logger = structlog.get_logger(__name__)

Number = Union[Decimal, float, int, str]

THREE_DECIMALS = Decimal("0.001")


def to_decimal(value: Number) -> Decimal:
    """Convert a catalog number without binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round3(value: Number) -> Decimal:
    """Round half-up to 3 decimals, the persisted cost precision."""
    return to_decimal(value).quantize(THREE_DECIMALS, rounding=ROUND_HALF_UP)


class CostAggregator:
    """
    Per-core, per-hour and per-month cost buckets of one price.

    Dimension routing:
        - 'percoreperhour' -> per core
        - prefix 'perhour' -> per hour
        - prefix 'permonth' -> per month
        - anything else is logged and dropped
    """

    def __init__(self):
        self.per_core = Decimal(0)
        self.per_hour = Decimal(0)
        self.per_month = Decimal(0)

    def accumulate(self, dimension: str, value: Number) -> bool:
        """
        Add a dimension value to its bucket.

        Returns:
            False when the dimension is unknown and the value was dropped
        """
        amount = to_decimal(value)
        if dimension == "percoreperhour":
            self.per_core += amount
        elif dimension.startswith("perhour"):
            self.per_hour += amount
        elif dimension.startswith("permonth"):
            self.per_month += amount
        else:
            logger.warning("unknown_cost_dimension", dimension=dimension, value=str(amount))
            return False
        return True

    def to_monthly_cost(self, cpu: Number, hours_per_month: Number) -> Decimal:
        """per_month + (per_hour + per_core * cpu) * hours_per_month"""
        return self.per_month + (
            self.per_hour + self.per_core * to_decimal(cpu)
        ) * to_decimal(hours_per_month)

    def is_empty(self) -> bool:
        return not (self.per_core or self.per_hour or self.per_month)

    def __repr__(self) -> str:
        return (
            f"CostAggregator(per_core={self.per_core}, per_hour={self.per_hour}, "
            f"per_month={self.per_month})"
        )
