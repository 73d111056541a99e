"""
Per-run state of a catalog sync.

Created for each sync call and dropped at the end of it. Holds the
enablement patterns, code -> entity caches, the guard sets making each
descriptive merge happen once per run, and the price codes confirmed by the
remote catalog during this run.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Set

from azure_catalog.catalog.enablement import EnablementPatterns
from azure_catalog.models.models import (
    DatabaseType,
    InstanceType,
    PriceTerm,
    Region,
    StorageType,
    SupportType,
)


@dataclass
class UpdateContext:
    """Mutable state shared by the importers of one sync run."""

    node: str
    patterns: EnablementPatterns
    force: bool = False
    hours_month: int = 730

    # Persisted entities by natural code
    regions: Dict[str, Region] = field(default_factory=dict)
    price_terms: Dict[str, PriceTerm] = field(default_factory=dict)
    instance_types: Dict[str, InstanceType] = field(default_factory=dict)
    database_types: Dict[str, DatabaseType] = field(default_factory=dict)
    storage_types: Dict[str, StorageType] = field(default_factory=dict)
    support_types: Dict[str, SupportType] = field(default_factory=dict)

    # Previously persisted prices by code, keyed by price model name
    previous: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    # Codes merged during this run, keyed by entity kind
    merged: Dict[str, Set[str]] = field(default_factory=lambda: defaultdict(set))

    # Price codes confirmed by the remote catalog during this run
    prices: Dict[str, Set[str]] = field(default_factory=lambda: defaultdict(set))

    # Document level lookups
    sizes_by_id: Dict[str, Optional[str]] = field(default_factory=dict)
    transactions: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def merged_regions(self) -> Set[str]:
        return self.merged["region"]

    @property
    def merged_terms(self) -> Set[str]:
        return self.merged["term"]

    def confirm(self, kind: str, code: str) -> None:
        """Record a price code as still offered."""
        self.prices[kind].add(code)

    def confirmed(self, kind: str) -> Set[str]:
        return self.prices[kind]

    def previous_of(self, kind: str) -> Dict[str, Any]:
        return self.previous.setdefault(kind, {})

    # Enablement shortcuts
    def is_enabled_region(self, region: str) -> bool:
        return self.patterns.is_enabled_region(region)

    def is_enabled_type(self, code: str) -> bool:
        return self.patterns.is_enabled_type(code)

    def is_enabled_os(self, os: str) -> bool:
        return self.patterns.is_enabled_os(os)

    def is_enabled_database_type(self, code: str) -> bool:
        return self.patterns.is_enabled_database_type(code)

    def is_enabled_engine(self, engine: str) -> bool:
        return self.patterns.is_enabled_engine(engine)
