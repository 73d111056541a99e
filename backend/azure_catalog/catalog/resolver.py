"""
Entity resolution and idempotent upsert.

Two primitives back every importer:

- ensure_descriptive: find-or-create an entity by natural code and merge its
  descriptive attributes at most once per run.
- record_cost: write the cost of a price on every occurrence.

Re-running against an unchanged catalog therefore creates nothing new and
rewrites the same rounded costs.
"""
from typing import Any, Callable, Dict, Optional, Type, TypeVar

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from azure_catalog.catalog.context import UpdateContext
from azure_catalog.catalog.costs import Number, round3

logger = structlog.get_logger(__name__)

E = TypeVar("E")


class EntityResolver:
    """Find-or-create by natural code, with once-per-run descriptive merge."""

    def __init__(self, db: Session, context: UpdateContext):
        self.db = db
        self.context = context

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, model: Type[E], key: str = "code", *criteria) -> Dict[str, E]:
        """
        Load the persisted entities of this node, keyed by natural code.

        Args:
            model: Entity class carrying a `node` column
            key: Attribute holding the natural code
            criteria: Extra WHERE clauses
        """
        stmt = select(model).where(model.node == self.context.node, *criteria)
        return {getattr(e, key): e for e in self.db.execute(stmt).scalars()}

    def load_previous(self, kind: str, model: Type[E], *criteria) -> Dict[str, E]:
        """
        Load the prices persisted by previous runs, keyed by code.

        Prices belong to the node through their type.
        """
        type_model = model.type.property.mapper.class_
        stmt = (
            select(model)
            .join(model.type)
            .where(type_model.node == self.context.node, *criteria)
        )
        previous = {p.code: p for p in self.db.execute(stmt).scalars()}
        self.context.previous[kind] = previous
        logger.debug("loaded_previous_prices", kind=kind, count=len(previous))
        return previous

    # ------------------------------------------------------------------
    # Upsert
    # ------------------------------------------------------------------

    def ensure_descriptive(
        self,
        kind: str,
        cache: Dict[str, E],
        code: str,
        factory: Callable[[str], E],
        merge: Callable[[E], Any],
    ) -> E:
        """
        Find or create an entity, then merge it once per run.

        Args:
            kind: Guard set name ('region', 'term', 'instance_type', ...)
            cache: code -> entity map of the run context
            code: Natural code
            factory: Builds a new entity for a code not seen yet
            merge: Writes the descriptive attributes

        Returns:
            The cached, possibly merged, entity
        """
        entity = cache.get(code)
        if entity is None:
            entity = factory(code)
            cache[code] = entity

        guard = self.context.merged[kind]
        if code not in guard:
            merge(entity)
            guard.add(code)
            self.db.add(entity)
        return entity

    def ensure_price(
        self,
        kind: str,
        model: Type[E],
        code: str,
        merge: Callable[[E], Any],
    ) -> E:
        """
        Find or create a price and confirm its code for this run.

        Descriptive attributes are merged for new prices, or for every price
        when the run is forced, once per run.
        """
        previous = self.context.previous_of(kind)
        price = previous.get(code)
        if price is None:
            price = model(code=code)
            previous[code] = price

        guard = self.context.merged[kind]
        if code not in guard:
            if price.id is None or self.context.force:
                merge(price)
                self.db.add(price)
            guard.add(code)

        self.context.confirm(kind, code)
        return price

    def record_cost(self, price: E, cost: Number, period: Optional[int] = 0, **components: Optional[Number]) -> E:
        """
        Write the monthly cost of a price, rounded to 3 decimals.

        Args:
            price: Price entity
            cost: Monthly cost
            period: Term period in months; cost_period = cost * max(1, period)
            components: Other cost columns, e.g. cost_gb, cost_transaction
        """
        price.cost = round3(cost)
        price.cost_period = round3(price.cost * max(1, period or 0))
        for name, value in components.items():
            setattr(price, name, None if value is None else round3(value))
        self.db.add(price)
        return price
