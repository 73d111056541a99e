"""
Support plans and prices, from the bundled CSV tables.
"""
from typing import Dict, Optional

from azure_catalog.catalog.importers.base import AbstractAzureImport
from azure_catalog.core.reference import load_support_prices, load_support_types
from azure_catalog.models.models import QuoteSupport, SupportPrice, SupportType

KIND = "support"


def _int(value: Optional[str]) -> Optional[int]:
    return None if value is None else int(value)


class SupportImport(AbstractAzureImport):
    """Support importer; there is no remote document for support."""

    category = "support"

    def install(self) -> None:
        self.next_step("initialize")
        self.context.support_types.update(self.resolver.load(SupportType))
        self.resolver.load_previous(KIND, SupportPrice)

        self.next_step("install")
        for row in load_support_types():
            self.install_support_type(row)
        for row in load_support_prices():
            self.install_support_price(row)

        self.next_step("purge")
        self.purge(KIND, QuoteSupport)

    def install_support_type(self, row: Dict[str, Optional[str]]) -> SupportType:
        context = self.context

        def merge(t: SupportType) -> None:
            t.name = row["name"]
            t.description = row["description"]
            t.access_api = row["accessApi"]
            t.access_chat = row["accessChat"]
            t.access_email = row["accessEmail"]
            t.access_phone = row["accessPhone"]
            t.slo_critical = _int(row["sloCritical"])
            t.slo_urgent = _int(row["sloUrgent"])
            t.slo_medium = _int(row["sloMedium"])
            t.slo_low = _int(row["sloLow"])
            t.commitment = _int(row["commitment"])
            t.seats = _int(row["seats"])
            t.level = row["level"]

        return self.resolver.ensure_descriptive(
            "support_type",
            context.support_types,
            row["code"],
            lambda c: SupportType(node=context.node, code=c),
            merge,
        )

    def install_support_price(self, row: Dict[str, Optional[str]]) -> Optional[SupportPrice]:
        stype = self.context.support_types.get(row["type"])
        if stype is None:
            self.logger.error("unknown_support_type", code=row["code"], type=row["type"])
            return None

        def merge(p: SupportPrice) -> None:
            p.type = stype

        price = self.resolver.ensure_price(KIND, SupportPrice, row["code"], merge)
        price.rate = row["rate"]
        self.processed += 1
        return self.resolver.record_cost(
            price,
            row["cost"] or 0,
            stype.commitment or 0,
            min=row["min"],
            limit=row["limit"],
        )
