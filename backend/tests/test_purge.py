"""
Unit tests for stale price deletion.
"""
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from azure_catalog.catalog.purge import PurgeReconciler
from azure_catalog.models.models import (
    InstancePrice,
    InstanceType,
    PriceTerm,
    QuoteInstance,
    Region,
)


@pytest.fixture
def prices(db_session, context):
    itype = InstanceType(node=context.node, code="ds4v2", cpu=8, ram=28672)
    term = PriceTerm(node=context.node, code="payg")
    previous = {}
    for region in ("europe-north", "europe-west", "us-east"):
        price = InstancePrice(
            code=f"{region}/payg/linux-ds4v2-standard",
            type=itype,
            term=term,
            location=Region(node=context.node, name=region),
            cost=Decimal("1.000"),
        )
        db_session.add(price)
        previous[price.code] = price
    db_session.commit()
    return previous


class TestPurgeReconciler:
    """Previous minus confirmed codes are deleted."""

    def test_nothing_to_purge(self, db_session, prices):
        purged = PurgeReconciler(db_session).purge(prices, set(prices), QuoteInstance)

        assert purged == 0
        assert db_session.query(InstancePrice).count() == 3

    def test_stale_prices_are_deleted(self, db_session, prices):
        valid = {"europe-north/payg/linux-ds4v2-standard"}

        with capture_logs() as logs:
            purged = PurgeReconciler(db_session).purge(prices, valid, QuoteInstance)
        db_session.commit()

        assert purged == 2
        assert set(prices) == valid
        assert [p.code for p in db_session.query(InstancePrice)] == ["europe-north/payg/linux-ds4v2-standard"]
        assert any(e["event"] == "purged_prices" and e["count"] == 2 for e in logs)

    def test_quote_lines_are_deleted_first(self, db_session, prices):
        """Quote lines referencing a stale price go with it."""
        stale = prices["us-east/payg/linux-ds4v2-standard"]
        kept = prices["europe-north/payg/linux-ds4v2-standard"]
        db_session.add_all([
            QuoteInstance(name="stale", price=stale),
            QuoteInstance(name="kept", price=kept),
        ])
        db_session.commit()
        valid = {kept.code, "europe-west/payg/linux-ds4v2-standard"}

        with capture_logs() as logs:
            purged = PurgeReconciler(db_session).purge(prices, valid, QuoteInstance)
        db_session.commit()

        assert purged == 1
        assert [q.name for q in db_session.query(QuoteInstance)] == ["kept"]
        assert any(e["event"] == "purged_quote_lines" and e["count"] == 1 for e in logs)

    def test_unsaved_price_is_only_forgotten(self, db_session, prices):
        prices["new"] = InstancePrice(code="new")

        purged = PurgeReconciler(db_session).purge(prices, set(prices) - {"new"}, QuoteInstance)

        assert purged == 1
        assert "new" not in prices
        assert db_session.query(InstancePrice).count() == 3
