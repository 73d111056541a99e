"""
Managed database prices (MySQL, MariaDB, PostgreSQL, SQL Server vCore).

Each engine has its own calculator document. Compute offers become database
types priced per SKU/term; per-GB offers become database storage types and
storage prices.
"""
import json
from decimal import Decimal
from typing import Dict, List, Optional

from azure_catalog.catalog.decoder import (
    DATABASE_ENGINES,
    STORAGE_DIMENSION,
    ComputeRole,
    DatabaseEngine,
    StorageRole,
    decode_database_offer,
    is_ignored_database_sku,
)
from azure_catalog.catalog.documents import AzureDatabaseOffer, DatabaseCatalog
from azure_catalog.catalog.importers.base import AbstractAzureImport
from azure_catalog.catalog.regions import is_byol
from azure_catalog.core.reference import get_rate, load_database_ram, load_db_storage_types
from azure_catalog.models.models import (
    DatabasePrice,
    DatabaseType,
    PriceTerm,
    QuoteDatabase,
    QuoteStorage,
    StoragePrice,
    StorageType,
)

LICENSE_BYOL = "BYOL"
KIND = "database"
STORAGE_KIND = "database_storage"

# Size names of the SQL Server tiers, absent from the documents
SQL_SIZE_NAMES = {
    "sql-gp": "General Purpose",
    "sql-bc": "Business Critical",
}


def _to_float(value: Optional[str]) -> Optional[float]:
    return None if value is None else float(value)


def _to_int(value: Optional[str]) -> Optional[int]:
    return None if value is None else int(float(value))


class DatabaseImport(AbstractAzureImport):
    """Database importer, one pass per enabled engine."""

    category = "database"

    def install(self) -> None:
        self.next_step("initialize")
        context = self.context
        context.database_types.update(self.resolver.load(DatabaseType))
        context.price_terms.update(self.resolver.load(PriceTerm))
        context.storage_types.update(self.resolver.load(StorageType))
        static_codes = list(load_db_storage_types())
        self.resolver.load_previous(
            STORAGE_KIND, StoragePrice,
            StorageType.code.in_(static_codes)
        )

        disabled = []
        for engine in DATABASE_ENGINES:
            if engine.engine == "SQL SERVER":
                context.sizes_by_id.update(SQL_SIZE_NAMES)
            if not context.is_enabled_engine(engine.engine):
                self.next_step(f"{engine.engine}-disabled")
                disabled.append(engine.engine)
                continue
            self.install_engine(engine)

        # A disabled engine confirms none of its storage prices
        if disabled:
            self.logger.info("storage_purge_skipped", disabled_engines=disabled)
        else:
            self.next_step("purge-storage")
            self.purge(STORAGE_KIND, QuoteStorage)

    def install_engine(self, engine: DatabaseEngine) -> None:
        """Install the prices of one enabled engine, then purge its stale prices."""
        self.next_step(f"{engine.engine}-initialize")
        self.resolver.load_previous(KIND, DatabasePrice, DatabasePrice.engine == engine.engine)

        self.next_step(f"{engine.engine}-retrieve-catalog")
        catalog = self.fetch(engine.path, DatabaseCatalog)

        self.next_step(f"{engine.engine}-update")
        self.common_preparation(catalog)
        self.context.sizes_by_id.update((c.id, c.name) for c in catalog.compute_types)
        for offer_id, offer in catalog.offers.items():
            self.parse_offer(engine, offer_id, offer)

        self.next_step(f"{engine.engine}-install", skus=len(catalog.skus))
        for sku, terms in catalog.skus.items():
            if is_ignored_database_sku(sku):
                continue
            self.install_sku(catalog, engine, sku, terms)

        purged = self.purge(KIND, QuoteDatabase)
        self.logger.info("engine_imported", engine=engine.engine, prices=len(self.context.confirmed(KIND)),
                         purged=purged)

    # ------------------------------------------------------------------
    # Offers
    # ------------------------------------------------------------------

    def parse_offer(self, engine: DatabaseEngine, offer_id: str, offer: AzureDatabaseOffer) -> None:
        role = decode_database_offer(engine, offer_id, offer.prices)
        if isinstance(role, StorageRole):
            self.install_storage_prices(role, offer)
        elif isinstance(role, ComputeRole):
            code = role.type_code()
            if self.context.is_enabled_database_type(code):
                offer.type = self.install_database_type(code, engine.engine, role)
                offer.edition = engine.edition
                offer.storage_engine = engine.storage_engine

    def to_size_name(self, size_id: str) -> str:
        return self.context.sizes_by_id.get(size_id) or size_id

    def install_database_type(self, code: str, engine: str, role: ComputeRole) -> Optional[DatabaseType]:
        """
        Install a database type as needed.

        Returns:
            The type, or None when no RAM/vCore ratio is known for it
        """
        ram_vcore = load_database_ram()
        ram = ram_vcore.get(f"{engine}-gen{role.generation}", ram_vcore.get(role.tier))
        if ram is None:
            self.logger.error(
                "unknown_ram_vcore_ratio",
                engine=engine,
                generation=role.generation,
                tier=role.tier
            )
            return None

        context = self.context

        def merge(t: DatabaseType) -> None:
            t.cpu = float(role.vcore)
            t.ram = int(ram * role.vcore * 1024)
            t.name = (
                f"{self.to_size_name('gen' + str(role.generation))}-{role.vcore} "
                f"{self.to_size_name(role.tier)}"
            )
            t.description = json.dumps(
                {"gen": str(role.generation), "engine": engine, "tier": role.tier}
            )
            t.cpu_rate = get_rate("cpu", role.tier)
            t.ram_rate = get_rate("ram", role.tier)
            # Network and storage follow the CPU rating
            t.network_rate = t.cpu_rate
            t.storage_rate = t.cpu_rate

        return self.resolver.ensure_descriptive(
            "database_type",
            context.database_types,
            code.lower(),
            lambda c: DatabaseType(node=context.node, code=c),
            merge,
        )

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def install_storage_prices(self, role: StorageRole, offer: AzureDatabaseOffer) -> None:
        for code in role.type_codes:
            stype = self.install_storage_type(code)
            if stype is None:
                continue
            for region, value in offer.prices[STORAGE_DIMENSION].items():
                if self.context.is_enabled_region(region):
                    self.install_storage_price(stype, region, value.value)

    def install_storage_type(self, code: str) -> Optional[StorageType]:
        static = load_db_storage_types().get(code)
        if static is None:
            self.logger.error("unknown_storage_type", code=code)
            return None

        context = self.context

        def merge(t: StorageType) -> None:
            t.name = static["name"] or code
            t.description = static["description"]
            t.availability = _to_float(static["availability"])
            t.engine = static["engine"]
            t.database_type = static["databaseType"]
            t.instance_type = static["instanceType"]
            t.durability9 = _to_int(static["durability9"])
            t.iops = _to_int(static["iops"])
            t.latency = static["latency"]
            t.maximal = _to_float(static["maximal"])
            t.minimal = _to_float(static["minimal"])
            t.optimized = static["optimized"]
            t.throughput = _to_int(static["throughput"])

        return self.resolver.ensure_descriptive(
            "storage_type",
            context.storage_types,
            code,
            lambda c: StorageType(node=context.node, code=c),
            merge,
        )

    def install_storage_price(self, stype: StorageType, region: str, cost_gb: float) -> StoragePrice:
        def merge(p: StoragePrice) -> None:
            p.type = stype
            p.location = self.locations.resolve_region(region)

        price = self.resolver.ensure_price(STORAGE_KIND, StoragePrice, f"{region}/az/{stype.code}", merge)
        self.processed += 1
        return self.resolver.record_cost(price, 0, cost_gb=cost_gb)

    # ------------------------------------------------------------------
    # Compute prices
    # ------------------------------------------------------------------

    def install_sku(self, catalog: DatabaseCatalog, engine: DatabaseEngine, sku: str,
                    terms: Dict[str, List[str]]) -> None:
        for term_name, components in terms.items():
            term = self.locations.resolve_term(catalog, term_name, sku)
            local_code = f"{term.code}/{sku}/{engine.engine}"
            byol = is_byol(term_name)

            def callback(dtype, edition, storage_engine, cost: Decimal, region: str,
                         term=term, local_code=local_code, byol=byol) -> None:
                self.install_database_price(term, local_code, dtype, cost, engine.engine,
                                            edition, storage_engine, byol, region)

            self.check_components(catalog, components, sku, term_name,
                                  self.context.is_enabled_database_type, callback)

    def install_database_price(
        self,
        term: PriceTerm,
        local_code: str,
        dtype: DatabaseType,
        monthly_cost: Decimal,
        engine: str,
        edition: Optional[str],
        storage_engine: Optional[str],
        byol: bool,
        region: str,
    ) -> DatabasePrice:
        code = region + ("/byol/" if byol else "/") + local_code

        def merge(p: DatabasePrice) -> None:
            p.location = self.locations.resolve_region(region)
            p.engine = engine
            p.storage_engine = storage_engine
            p.edition = edition
            p.term = term
            p.type = dtype
            p.license = LICENSE_BYOL if byol else None
            p.period = term.period

        price = self.resolver.ensure_price(KIND, DatabasePrice, code, merge)
        self.processed += 1
        return self.resolver.record_cost(price, monthly_cost, term.period)
