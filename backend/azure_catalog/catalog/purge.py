"""
Purge reconciliation.

Prices persisted by a previous run but not confirmed by the current one
are deleted, together with the quote lines still pointing at them.
"""
from typing import Dict, Iterable, Type

import structlog
from sqlalchemy import delete
from sqlalchemy.orm import Session

logger = structlog.get_logger(__name__)


class PurgeReconciler:
    """Delete stale prices and the quote lines referencing them."""

    def __init__(self, db: Session):
        self.db = db

    def purge(self, previous: Dict[str, object], valid_codes: Iterable[str], quote_model: Type) -> int:
        """
        Delete previous prices absent from the valid codes.

        Args:
            previous: code -> price as loaded at the start of the category
            valid_codes: Codes confirmed during this run
            quote_model: Quote line model referencing the price kind

        Returns:
            Number of prices purged
        """
        stale_codes = set(previous) - set(valid_codes)
        if not stale_codes:
            return 0

        stale = [previous[code] for code in sorted(stale_codes)]
        stale_ids = [p.id for p in stale if p.id is not None]
        if stale_ids:
            result = self.db.execute(
                delete(quote_model).where(quote_model.price_id.in_(stale_ids))
            )
            if result.rowcount:
                logger.warning(
                    "purged_quote_lines",
                    quote=quote_model.__tablename__,
                    count=result.rowcount
                )

        for price in stale:
            if price.id is not None:
                self.db.delete(price)
            previous.pop(price.code, None)
        self.db.flush()

        logger.info("purged_prices", count=len(stale), sample=sorted(stale_codes)[:5])
        return len(stale)
