"""
Virtual machine prices: pay-as-you-go, reservations, low priority and
bring-your-own-license, from the virtual-machines calculator document.
"""
import json
from decimal import Decimal
from typing import Dict, List, Optional

from azure_catalog.catalog.decoder import (
    DEFAULT_OS,
    decode_software,
    decode_vm_offer,
    find_os,
)
from azure_catalog.catalog.documents import AzureVmOffer, ComputeCatalog
from azure_catalog.catalog.importers.base import AbstractAzureImport
from azure_catalog.catalog.regions import is_byol
from azure_catalog.core.reference import get_rate
from azure_catalog.models.models import (
    InstancePrice,
    InstanceType,
    PriceTerm,
    QuoteInstance,
)

# Isolated sizes, dedicated to a single customer
DEDICATED_TYPES = frozenset(["e64", "m128ms", "g5", "gs5", "ds15v2", "d15v2", "f72v2", "l32"])

LICENSE_BYOL = "BYOL"
KIND = "instance"


class VmImport(AbstractAzureImport):
    """
    Compute importer.

    Offers are decoded into instance types, then every SKU/term mapping is
    priced for each enabled region.
    """

    category = "vm"
    path = "virtual-machines"

    def install(self) -> None:
        self.next_step("initialize")
        self.context.instance_types.update(self.resolver.load(InstanceType))
        self.context.price_terms.update(self.resolver.load(PriceTerm))
        self.resolver.load_previous(KIND, InstancePrice)

        self.next_step("retrieve-catalog")
        catalog = self.fetch(self.path, ComputeCatalog)

        self.next_step("parse-catalog")
        self.common_preparation(catalog)
        sizes = catalog.sizes_by_id
        for offer_id, offer in catalog.offers.items():
            self.parse_offer(sizes, offer_id, offer)

        self.next_step("install", skus=len(catalog.skus))
        software_by_id = catalog.software_by_id
        for sku, terms in catalog.skus.items():
            self.install_sku(catalog, software_by_id, sku, terms)

        self.next_step("purge")
        self.purge(KIND, QuoteInstance)

    def parse_offer(self, sizes: Dict[str, Optional[str]], offer_id: str, offer: AzureVmOffer) -> None:
        """Attach the instance type decoded from the offer id."""
        key = decode_vm_offer(offer_id)
        if offer.series and key.type_code:
            name = sizes.get(key.size) or key.size
            offer.type = self.install_instance_type(key.type_code, name, key.basic, offer)

    def install_instance_type(self, code: str, name: str, basic: bool, offer: AzureVmOffer) -> InstanceType:
        context = self.context

        def merge(t: InstanceType) -> None:
            t.name = f"{name} Basic" if basic else name
            t.cpu = float(offer.cores)
            t.ram = int(offer.ram * 1024)
            t.description = json.dumps({"series": offer.series, "disk": offer.disk_size})
            t.constant = offer.series != "B"
            t.auto_scale = not basic

            rate = "LOW" if basic else "GOOD"
            t.cpu_rate = "LOW" if basic else get_rate("cpu", t.code)
            t.ram_rate = rate
            t.network_rate = get_rate("network", t.code)
            t.storage_rate = rate

        return self.resolver.ensure_descriptive(
            "instance_type",
            context.instance_types,
            code,
            lambda c: InstanceType(node=context.node, code=c),
            merge,
        )

    def install_sku(self, catalog: ComputeCatalog, software_by_id, sku: str, terms: Dict[str, List[str]]) -> None:
        """Install the prices of every term of a SKU."""
        software = decode_software(sku, software_by_id)
        os = find_os(sku.split("-")) or DEFAULT_OS
        for term_name, components in terms.items():
            term = self.locations.resolve_term(catalog, term_name, sku)
            self.install_term_prices(catalog, sku, os, software, term, term_name, components)

    def install_term_prices(
        self,
        catalog: ComputeCatalog,
        sku: str,
        os: str,
        software: Optional[str],
        term: PriceTerm,
        term_name: str,
        components: List[str],
    ) -> None:
        if not self.context.is_enabled_os(os):
            return
        byol = is_byol(term_name)
        local_code = f"{term.code}/{sku}"

        def callback(itype, _edition, _storage_engine, cost: Decimal, region: str) -> None:
            self.install_instance_price(term, os, local_code, itype, cost, software, byol, region)

        self.check_components(catalog, components, sku, term_name, self.context.is_enabled_type, callback)

    def install_instance_price(
        self,
        term: PriceTerm,
        os: str,
        local_code: str,
        itype: InstanceType,
        monthly_cost: Decimal,
        software: Optional[str],
        byol: bool,
        region: str,
    ) -> InstancePrice:
        code = region + ("/byol/" if byol else "/") + local_code

        def merge(p: InstancePrice) -> None:
            p.location = self.locations.resolve_region(region)
            p.os = os
            p.software = software
            p.license = LICENSE_BYOL if byol else None
            p.term = term
            p.tenancy = "DEDICATED" if itype.code in DEDICATED_TYPES else "SHARED"
            p.type = itype
            p.period = term.period

        price = self.resolver.ensure_price(KIND, InstancePrice, code, merge)
        self.processed += 1
        return self.resolver.record_cost(price, monthly_cost, term.period)
