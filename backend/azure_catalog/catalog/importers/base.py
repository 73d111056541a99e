"""
Base class for the category importers.

An importer runs Initialize -> Retrieve -> Decode -> Install -> Purge for
one category (compute, database, disk, support) against the shared run
context.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

import structlog
from pydantic import ValidationError
from sqlalchemy.orm import Session

from azure_catalog.catalog.client import CatalogClient
from azure_catalog.catalog.context import UpdateContext
from azure_catalog.catalog.costs import CostAggregator
from azure_catalog.catalog.decoder import split_component
from azure_catalog.catalog.documents import GLOBAL_REGION, AzureCatalog
from azure_catalog.catalog.purge import PurgeReconciler
from azure_catalog.catalog.regions import RegionTermResolver
from azure_catalog.catalog.resolver import EntityResolver
from azure_catalog.exceptions import CatalogFetchError

logger = structlog.get_logger(__name__)

C = TypeVar("C", bound=AzureCatalog)

# (type, edition, storage engine, monthly cost, region)
PriceCallback = Callable[[Any, Optional[str], Optional[str], Decimal, str], Any]


class AbstractAzureImport(ABC):
    """Shared plumbing: fetch, region preparation, component checking."""

    category: str = "base"

    def __init__(self, db: Session, client: CatalogClient, context: UpdateContext):
        self.db = db
        self.client = client
        self.context = context
        self.resolver = EntityResolver(db, context)
        self.locations = RegionTermResolver(self.resolver)
        self.purger = PurgeReconciler(db)
        self.logger = logger.bind(component=self.category)
        self.processed = 0
        self.purged = 0

    @abstractmethod
    def install(self) -> None:
        """Import the category into the persisted catalog."""
        pass

    def next_step(self, phase: str, **kwargs) -> None:
        self.logger.info("import_phase", phase=f"{self.category}-{phase}", **kwargs)

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def fetch(self, path: str, model: Type[C]) -> C:
        """
        Fetch and parse a calculator document.

        Invalid offer and SKU entries are dropped while parsing.

        Raises:
            CatalogFetchError: When the document cannot be read or a section
                has an unexpected shape
        """
        url = self.client.calculator_url(path)
        raw = self.client.get_json(url)
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            raise CatalogFetchError(url, f"unexpected document structure: {e}", self.category) from e

    def common_preparation(self, catalog: AzureCatalog) -> None:
        """Install the enabled regions listed by the document."""
        for region in catalog.regions:
            if self.context.is_enabled_region(region.id):
                self.locations.resolve_region(region.id, region.name)

    # ------------------------------------------------------------------
    # Decode
    # ------------------------------------------------------------------

    def check_components(
        self,
        catalog: AzureCatalog,
        components: List[str],
        sku: str,
        term_name: str,
        type_filter: Callable[[str], bool],
        callback: PriceCallback,
    ) -> int:
        """
        Validate the components of a SKU/term and price each enabled region.

        A list of the wrong shape or any malformed component invalidates the
        whole list. Global components are summed once and added to every
        regional cost.

        Returns:
            Number of regional prices handed to the callback
        """
        if not isinstance(components, list) or not all(isinstance(c, str) for c in components):
            self.logger.error("invalid_price_component", component=components, sku=sku, term=term_name)
            return 0

        resolved_type = None
        edition = None
        storage_engine = None
        global_costs = CostAggregator()
        local_costs: Dict[str, CostAggregator] = {}

        for component in components:
            parts = split_component(component)
            if parts is None:
                self.logger.error("invalid_price_component", component=component, sku=sku, term=term_name)
                return 0
            offer_id, dimension = parts
            offer = catalog.offers.get(offer_id)
            if offer is None:
                self.logger.error("invalid_offer_reference", offer=offer_id, sku=sku, term=term_name)
                return 0
            local_prices = offer.prices.get(dimension)
            if local_prices is None:
                self.logger.error("invalid_dimension_reference", dimension=dimension, sku=sku, term=term_name)
                return 0

            if GLOBAL_REGION in local_prices:
                global_costs.accumulate(dimension, local_prices[GLOBAL_REGION].value)
            else:
                for region, price in local_prices.items():
                    if self.context.is_enabled_region(region):
                        local_costs.setdefault(region, CostAggregator()).accumulate(dimension, price.value)
                resolved_type = offer.type or resolved_type
                edition = offer.edition or edition
                storage_engine = offer.storage_engine or storage_engine

        if resolved_type is None:
            self.logger.error("unresolved_type", sku=sku, term=term_name)
            return 0
        if not type_filter(resolved_type.code):
            return 0

        hours = self.context.hours_month
        global_cost = global_costs.to_monthly_cost(resolved_type.cpu or 0, hours)
        for region, costs in local_costs.items():
            callback(
                resolved_type,
                edition,
                storage_engine,
                costs.to_monthly_cost(resolved_type.cpu or 0, hours) + global_cost,
                region,
            )
        return len(local_costs)

    def purge(self, kind: str, quote_model: Type) -> int:
        """Purge the prices of a kind not confirmed during this run."""
        count = self.purger.purge(
            self.context.previous_of(kind),
            self.context.confirmed(kind),
            quote_model,
        )
        self.purged += count
        return count
