"""
Catalog documents served by the Azure calculator pricing API.

Only the parts the importers read are modelled; unknown keys are ignored.
Decoding attaches resolved entities to offers through the excluded fields.

A malformed offer or SKU entry is logged and dropped on its own, a section
of the wrong shape (e.g. a list where a mapping is expected) fails the whole
document.
"""
from typing import Any, Dict, List, Optional, Type

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = structlog.get_logger(__name__)

GLOBAL_REGION = "global"


def _zero_if_none(value: Any) -> Any:
    # null numbers are read as 0
    return 0 if value is None else value


def _valid_entries(entries: Any, model: Type[BaseModel], section: str) -> Any:
    """Validate each entry of a mapping section, dropping the invalid ones."""
    if not isinstance(entries, dict):
        return entries
    valid = {}
    for key, entry in entries.items():
        try:
            valid[key] = model.model_validate(entry)
        except ValidationError as e:
            logger.error("invalid_catalog_entry", section=section, entry=key,
                         errors=[err["loc"] for err in e.errors()])
    return valid


class ValueWrapper(BaseModel):
    """A single price value."""
    model_config = ConfigDict(extra="ignore")

    value: float = 0.0

    null_value = field_validator("value", mode="before")(_zero_if_none)


class NamedResource(BaseModel):
    """Identifier (slug) and human name."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="slug")
    name: Optional[str] = Field(default=None, alias="displayName")


class AzureOffer(BaseModel):
    """
    Offer: cores, optional series and prices.

    prices: dimension name -> (region id or 'global' -> value)
    """
    model_config = ConfigDict(extra="ignore")

    cores: int = 0
    series: Optional[str] = None
    prices: Dict[str, Dict[str, ValueWrapper]] = Field(default_factory=dict)

    # Resolved while decoding, never read from the document
    type: Optional[Any] = Field(default=None, exclude=True)
    edition: Optional[str] = Field(default=None, exclude=True)
    storage_engine: Optional[str] = Field(default=None, exclude=True)

    null_cores = field_validator("cores", mode="before")(_zero_if_none)


class AzureVmOffer(AzureOffer):
    """Virtual machine offer."""

    ram: float = 0.0
    disk_size: int = Field(default=0, alias="diskSize")

    null_sizes = field_validator("ram", "disk_size", mode="before")(_zero_if_none)


class AzureDatabaseOffer(AzureOffer):
    """Managed database offer, compute or storage."""
    pass


class ManagedDisk(BaseModel):
    """Managed disk offer, prices are keyed by region."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    size: int = 0
    throughput: int = Field(default=0, alias="speed")
    iops: int = 0
    prices: Dict[str, ValueWrapper] = Field(default_factory=dict)

    null_sizes = field_validator("size", "throughput", "iops", mode="before")(_zero_if_none)


class AzureCatalog(BaseModel):
    """Common document shape: regions, offers, SKUs, tiers, billing options."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    regions: List[NamedResource] = Field(default_factory=list)
    offers: Dict[str, Any] = Field(default_factory=dict)
    # SKU -> term -> components, components are checked while pricing
    skus: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    tiers: List[NamedResource] = Field(default_factory=list)
    billing_options: List[NamedResource] = Field(default_factory=list, alias="billingOptions")

    @field_validator("skus", mode="before")
    @classmethod
    def drop_invalid_skus(cls, skus: Any) -> Any:
        if not isinstance(skus, dict):
            return skus
        valid = {}
        for sku, terms in skus.items():
            if isinstance(terms, dict):
                valid[sku] = terms
            else:
                logger.error("invalid_catalog_entry", section="skus", entry=sku)
        return valid

    @property
    def tiers_by_id(self) -> Dict[str, Optional[str]]:
        return {t.id: t.name for t in self.tiers}

    @property
    def billing_by_id(self) -> Dict[str, Optional[str]]:
        return {b.id: b.name for b in self.billing_options}


class ComputeCatalog(AzureCatalog):
    """virtual-machines/calculator document."""

    offers: Dict[str, AzureVmOffer] = Field(default_factory=dict)
    software_licenses: List[NamedResource] = Field(default_factory=list, alias="softwareLicenses")
    sizes_one_year: List[NamedResource] = Field(default_factory=list, alias="sizesOneYear")
    sizes_three_year: List[NamedResource] = Field(default_factory=list, alias="sizesThreeYear")
    sizes_five_year: List[NamedResource] = Field(default_factory=list, alias="sizesFiveYear")
    sizes_pay_go: List[NamedResource] = Field(default_factory=list, alias="sizesPayGo")

    @field_validator("offers", mode="before")
    @classmethod
    def drop_invalid_offers(cls, offers: Any) -> Any:
        return _valid_entries(offers, AzureVmOffer, "offers")

    @property
    def sizes_by_id(self) -> Dict[str, Optional[str]]:
        sizes: Dict[str, Optional[str]] = {}
        for group in (self.sizes_one_year, self.sizes_three_year,
                      self.sizes_five_year, self.sizes_pay_go):
            sizes.update((s.id, s.name) for s in group)
        return sizes

    @property
    def software_by_id(self) -> Dict[str, Optional[str]]:
        """Software slug -> name, most specific (reverse sorted) first."""
        return {
            s.id: s.name
            for s in sorted(self.software_licenses, key=lambda s: s.id, reverse=True)
        }


class DatabaseCatalog(AzureCatalog):
    """<engine>/calculator document."""

    offers: Dict[str, AzureDatabaseOffer] = Field(default_factory=dict)
    compute_types: List[NamedResource] = Field(default_factory=list, alias="computeTypes")

    @field_validator("offers", mode="before")
    @classmethod
    def drop_invalid_offers(cls, offers: Any) -> Any:
        return _valid_entries(offers, AzureDatabaseOffer, "offers")


class DiskCatalog(AzureCatalog):
    """managed-disks/calculator document."""

    offers: Dict[str, ManagedDisk] = Field(default_factory=dict)

    @field_validator("offers", mode="before")
    @classmethod
    def drop_invalid_offers(cls, offers: Any) -> Any:
        return _valid_entries(offers, ManagedDisk, "offers")
