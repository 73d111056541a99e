"""
Unit tests for cost aggregation and rounding.
"""
from decimal import Decimal

from structlog.testing import capture_logs

from azure_catalog.catalog.costs import CostAggregator, round3


class TestCostAggregator:
    """Dimension routing and monthly normalization."""

    def test_monthly_cost_formula(self):
        """per_month + (per_hour + per_core * cpu) * hours"""
        costs = CostAggregator()
        costs.accumulate("percoreperhour", 0.0001)
        costs.accumulate("perhour", 0.025)
        costs.accumulate("permonth", 0.15)

        assert round3(costs.to_monthly_cost(1, 730)) == Decimal("18.473")

    def test_per_core_scales_with_cpu(self):
        costs = CostAggregator()
        costs.accumulate("percoreperhour", 0.1)

        assert costs.to_monthly_cost(8, 730) == Decimal("584.0")

    def test_prefix_routing(self):
        """Reserved and spot hourly dimensions land in the hourly bucket."""
        costs = CostAggregator()
        costs.accumulate("perhourthreeyearreserved", 0.1)
        costs.accumulate("perhourspot", 0.2)
        costs.accumulate("permonthly", 1)

        assert costs.per_hour == Decimal("0.3")
        assert costs.per_month == Decimal("1")
        assert costs.per_core == Decimal("0")

    def test_unknown_dimension_is_logged_and_dropped(self):
        costs = CostAggregator()

        with capture_logs() as logs:
            accepted = costs.accumulate("pergb", 5)

        assert accepted is False
        assert costs.is_empty()
        assert logs[0]["event"] == "unknown_cost_dimension"
        assert logs[0]["dimension"] == "pergb"

    def test_values_are_summed(self):
        costs = CostAggregator()
        costs.accumulate("perhour", 0.233)
        costs.accumulate("perhour", 0.001)

        assert costs.per_hour == Decimal("0.234")

    def test_empty_aggregator_costs_nothing(self):
        assert CostAggregator().to_monthly_cost(4, 730) == Decimal(0)


class TestRound3:
    """Persisted precision."""

    def test_half_up(self):
        assert round3(Decimal("1.0005")) == Decimal("1.001")
        assert round3(Decimal("1.0004")) == Decimal("1.000")

    def test_float_input_has_no_binary_noise(self):
        assert round3(0.233 * 730 + 0.15) == Decimal("170.240")
