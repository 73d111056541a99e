"""
Region and price term resolution.

Regions are enriched from the bundled region table the first time they are
touched in a run. Price terms are decoded from the raw term name of the
catalog and the SKU suffix.
"""
from typing import Optional

import structlog

from azure_catalog.catalog.documents import AzureCatalog
from azure_catalog.catalog.resolver import EntityResolver
from azure_catalog.core.reference import load_regions
from azure_catalog.models.models import PriceTerm, Region

logger = structlog.get_logger(__name__)

DEFAULT_TERM = "payg"
TERM_LOW_PRIORITY = "lowpriority"
TERM_SPOT = "spot"
BYOL_MARKER = "ahb"

EPHEMERAL_TERMS = (TERM_LOW_PRIORITY, TERM_SPOT)

# Substring of the raw term -> commitment in months, first match wins
TERM_PERIODS = (
    ("three", 36),
    ("five", 60),
    ("one", 12),
)


def to_term_code(raw_term: str, sku: str) -> str:
    """
    Normalized term code.

    Low priority and spot SKUs force their own term; otherwise the BYOL
    prefix is removed and an empty remainder means pay-as-you-go.
    """
    if sku.endswith("-" + TERM_LOW_PRIORITY):
        return TERM_LOW_PRIORITY
    if sku.endswith("-" + TERM_SPOT):
        return TERM_SPOT
    code = raw_term[len(BYOL_MARKER):] if raw_term.startswith(BYOL_MARKER) else raw_term
    return code.lstrip("-") or DEFAULT_TERM


def to_term_period(raw_term: str) -> int:
    for marker, months in TERM_PERIODS:
        if marker in raw_term:
            return months
    return 0


def is_byol(raw_term: str) -> bool:
    return BYOL_MARKER in raw_term


class RegionTermResolver:
    """Resolve regions and price terms through the run caches."""

    def __init__(self, resolver: EntityResolver):
        self.resolver = resolver
        self.context = resolver.context

    def resolve_region(self, code: str, name: Optional[str] = None) -> Region:
        """
        Find or create a region, enriched once per run.

        Args:
            code: Azure region identifier, e.g. 'europe-north'
            name: Display name from the catalog document, if known
        """
        context = self.context

        def merge(region: Region) -> None:
            stats = load_regions().get(code, {})
            region.continent_m49 = stats.get("continentM49")
            region.country_m49 = stats.get("countryM49")
            region.country_a2 = stats.get("countryA2")
            region.placement = stats.get("placement")
            region.region_m49 = stats.get("regionM49")
            region.sub_region = stats.get("subRegion")
            region.latitude = stats.get("latitude")
            region.longitude = stats.get("longitude")
            region.description = name or stats.get("name")

        return self.resolver.ensure_descriptive(
            "region",
            context.regions,
            code,
            lambda c: Region(node=context.node, name=c),
            merge,
        )

    def resolve_term(self, catalog: AzureCatalog, raw_term: str, sku: str) -> PriceTerm:
        """
        Find or create the price term of a SKU/term mapping.

        Args:
            catalog: Document providing tier and billing option names
            raw_term: Term name as found in the SKU mapping, e.g. 'ahbthreeyear'
            sku: SKU identifier

        Returns:
            The merged term
        """
        context = self.context
        code = to_term_code(raw_term, sku)

        def merge(term: PriceTerm) -> None:
            term.name = catalog.tiers_by_id.get(code) or catalog.billing_by_id.get(code) or code
            term.period = to_term_period(raw_term)
            term.reservation = term.period > 0
            term.convertible_family = term.reservation
            term.convertible_type = term.reservation
            term.convertible_location = term.reservation
            term.convertible_os = term.reservation
            term.ephemeral = code in EPHEMERAL_TERMS
            logger.debug("merged_price_term", code=code, period=term.period)

        return self.resolver.ensure_descriptive(
            "term",
            context.price_terms,
            code,
            lambda c: PriceTerm(node=context.node, code=c),
            merge,
        )
