"""
Managed disk prices from the managed-disks calculator document.

Disk offers are priced per region with a fixed monthly cost; standard disks
also pay per transaction, priced by the 'transactions' offer.
"""
from decimal import Decimal

from azure_catalog.catalog.costs import to_decimal
from azure_catalog.catalog.documents import DiskCatalog, ManagedDisk
from azure_catalog.catalog.importers.base import AbstractAzureImport
from azure_catalog.core.reference import load_db_storage_types
from azure_catalog.models.models import QuoteStorage, StoragePrice, StorageType

KIND = "disk"
TRANSACTIONS_OFFER = "transactions"
DISK_PREFIXES = ("standardssd-", "standardhdd-", "premiumssd-")

# Standard disk figures when the catalog advertises none
STANDARD_IOPS = 500
STANDARD_THROUGHPUT = 60


def to_disk_name(offer_id: str) -> str:
    """'premiumssd-p30' -> 'p30'"""
    name = offer_id
    for prefix in DISK_PREFIXES:
        name = name.replace(prefix, "")
    return name


class DiskImport(AbstractAzureImport):
    """Managed disk importer."""

    category = "disk"
    path = "managed-disks"

    def install(self) -> None:
        self.next_step("initialize")
        context = self.context
        context.storage_types.update(self.resolver.load(StorageType))
        static_codes = list(load_db_storage_types())
        self.resolver.load_previous(KIND, StoragePrice, StorageType.code.notin_(static_codes))

        self.next_step("retrieve-catalog")
        catalog = self.fetch(self.path, DiskCatalog)

        self.next_step("update-catalog")
        self.common_preparation(catalog)
        transactions = catalog.offers.get(TRANSACTIONS_OFFER, ManagedDisk())
        context.transactions = {r: to_decimal(v.value) for r, v in transactions.prices.items()}

        for offer_id, disk in catalog.offers.items():
            if offer_id == TRANSACTIONS_OFFER or offer_id.startswith("ultrassd"):
                continue
            self.install_offer(offer_id, disk)

        self.next_step("purge")
        self.purge(KIND, QuoteStorage)

    def install_offer(self, offer_id: str, disk: ManagedDisk) -> None:
        stype = self.install_storage_type(offer_id, disk)
        premium = offer_id.startswith("premium")
        for region, value in disk.prices.items():
            if self.context.is_enabled_region(region):
                self.install_storage_price(stype, region, value.value, premium)

    def install_storage_type(self, offer_id: str, disk: ManagedDisk) -> StorageType:
        """Install a disk storage type, named after the offer without its tier prefix."""
        context = self.context
        snapshot = offer_id.endswith("snapshot")
        premium = offer_id.startswith("premium")
        standard = offer_id.startswith("standard")

        def merge(t: StorageType) -> None:
            if snapshot:
                t.latency = "WORST"
                t.minimal = 0
                t.optimized = "DURABILITY"
                t.iops = 0
                t.throughput = 0
            else:
                # https://docs.microsoft.com/en-us/azure/virtual-machines/windows/disk-scalability-targets
                t.latency = "BEST" if premium else "MEDIUM"
                t.minimal = disk.size
                t.maximal = disk.size
                t.optimized = "IOPS" if premium else None
                t.instance_type = "%"
                t.iops = STANDARD_IOPS if standard and disk.iops == 0 else disk.iops
                t.throughput = STANDARD_THROUGHPUT if standard and disk.throughput == 0 else disk.throughput

        return self.resolver.ensure_descriptive(
            "storage_type",
            context.storage_types,
            to_disk_name(offer_id),
            lambda c: StorageType(node=context.node, code=c, name=c),
            merge,
        )

    def install_storage_price(self, stype: StorageType, region: str, value: float, premium: bool) -> StoragePrice:
        def merge(p: StoragePrice) -> None:
            p.type = stype
            p.location = self.locations.resolve_region(region)

        price = self.resolver.ensure_price(KIND, StoragePrice, f"{region}-az-{stype.name}", merge)
        self.processed += 1

        cost_transaction = None
        if not premium:
            # $/10,000 transactions -> $/1,000,000 transactions
            cost_transaction = self.context.transactions.get(region, Decimal(0)) * 100
        return self.resolver.record_cost(price, value, cost_transaction=cost_transaction)
