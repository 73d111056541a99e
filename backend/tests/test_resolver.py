"""
Unit tests for find-or-create and once-per-run merging.
"""
from decimal import Decimal

import pytest

from azure_catalog.models.models import InstancePrice, InstanceType, PriceTerm, Region, StoragePrice


@pytest.fixture
def persisted_price(db_session, context):
    """A price left by a previous run."""
    itype = InstanceType(node=context.node, code="ds4v2", name="DS4 v2", cpu=8, ram=28672)
    region = Region(node=context.node, name="europe-north")
    term = PriceTerm(node=context.node, code="payg", name="Pay as you go")
    price = InstancePrice(
        code="europe-north/payg/linux-ds4v2-standard",
        type=itype, location=region, term=term,
        os="LINUX", tenancy="SHARED", cost=Decimal("170.240"),
    )
    db_session.add(price)
    db_session.commit()
    return price


def merge_linux(price):
    price.os = "LINUX"
    price.tenancy = "SHARED"


class TestEnsureDescriptive:
    """Find-or-create with a per-run merge guard."""

    def test_creates_and_merges_once(self, resolver, context):
        calls = []

        def merge(t):
            calls.append(t.code)
            t.name = "DS4 v2"

        factory = lambda c: InstanceType(node=context.node, code=c)
        first = resolver.ensure_descriptive("instance_type", context.instance_types, "ds4v2", factory, merge)
        second = resolver.ensure_descriptive("instance_type", context.instance_types, "ds4v2", factory, merge)

        assert first is second
        assert calls == ["ds4v2"]
        assert first.name == "DS4 v2"

    def test_cached_entity_is_merged_again_in_a_new_run(self, resolver, context):
        """The guard is per run, the cache may come from the database."""
        existing = InstanceType(node=context.node, code="ds4v2", name="stale")
        context.instance_types["ds4v2"] = existing

        merged = resolver.ensure_descriptive(
            "instance_type", context.instance_types, "ds4v2",
            lambda c: InstanceType(node=context.node, code=c),
            lambda t: setattr(t, "name", "DS4 v2"),
        )

        assert merged is existing
        assert existing.name == "DS4 v2"


class TestEnsurePrice:
    """Price merge depends on novelty and force."""

    def test_new_price_is_merged_and_confirmed(self, resolver, context):
        price = resolver.ensure_price("instance", InstancePrice, "europe-north/payg/x", merge_linux)

        assert price.os == "LINUX"
        assert context.confirmed("instance") == {"europe-north/payg/x"}
        assert context.previous_of("instance")["europe-north/payg/x"] is price

    def test_existing_price_is_not_merged(self, resolver, context, persisted_price):
        persisted_price.os = "WINDOWS"
        resolver.load_previous("instance", InstancePrice)

        price = resolver.ensure_price("instance", InstancePrice, persisted_price.code, merge_linux)

        assert price is persisted_price
        assert price.os == "WINDOWS"
        assert persisted_price.code in context.confirmed("instance")

    def test_force_merges_existing_price(self, resolver, context, persisted_price):
        context.force = True
        persisted_price.os = "WINDOWS"
        resolver.load_previous("instance", InstancePrice)

        price = resolver.ensure_price("instance", InstancePrice, persisted_price.code, merge_linux)

        assert price.os == "LINUX"

    def test_force_merges_once_per_run(self, resolver, context, persisted_price):
        context.force = True
        resolver.load_previous("instance", InstancePrice)
        calls = []

        for _ in range(3):
            resolver.ensure_price("instance", InstancePrice, persisted_price.code, calls.append)

        assert len(calls) == 1

    def test_previous_prices_are_scoped_to_node(self, resolver, context, persisted_price, db_session):
        persisted_price.type.node = "service:prov:azure:other"
        db_session.commit()

        assert resolver.load_previous("instance", InstancePrice) == {}


class TestRecordCost:
    """Costs are rounded half-up to 3 decimals."""

    def test_rounding_and_period(self, resolver):
        price = InstancePrice(code="x")

        resolver.record_cost(price, Decimal("73.0004"), 36)

        assert price.cost == Decimal("73.000")
        assert price.cost_period == Decimal("2628.000")

    def test_no_period_keeps_monthly_cost(self, resolver):
        price = InstancePrice(code="x")

        resolver.record_cost(price, 170.2399, 0)

        assert price.cost == Decimal("170.240")
        assert price.cost_period == Decimal("170.240")

    def test_components(self, resolver):
        price = StoragePrice(code="europe-north-az-s4")
        resolver.record_cost(price, 1.5355, cost_transaction=Decimal("0.0504"), cost_gb=None)

        assert price.cost == Decimal("1.536")
        assert price.cost_transaction == Decimal("0.050")
        assert price.cost_gb is None
