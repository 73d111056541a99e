"""
SKU and offer decoding.

Azure encodes tier, generation, vCores, OS and storage classes inside
offer identifiers. Decoding is table driven: an ordered list of patterns,
the first full match wins and its extractor builds the result.
"""
import re
from dataclasses import dataclass
from re import Match, Pattern
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

# ============================================================================
# RESULT TYPES
# ============================================================================


@dataclass(frozen=True)
class StorageRole:
    """Offer prices one or more storage types."""
    type_codes: Tuple[str, ...]


@dataclass(frozen=True)
class ComputeRole:
    """Offer prices a compute tier/generation/vCore combination."""
    tier: str
    generation: int
    vcore: int

    def type_code(self) -> str:
        return f"{self.tier}-gen{self.generation}-{self.vcore}"


Role = Union[StorageRole, ComputeRole]
Extractor = Callable[[Match], Role]


class RuleTable:
    """Ordered (pattern, extractor) rules, first full match wins."""

    def __init__(self, rules: Sequence[Tuple[str, Extractor]]):
        self.rules: List[Tuple[Pattern, Extractor]] = [
            (re.compile(pattern), extractor) for pattern, extractor in rules
        ]

    def decode(self, identifier: str) -> Optional[Role]:
        for pattern, extractor in self.rules:
            match = pattern.fullmatch(identifier)
            if match:
                return extractor(match)
        return None

    def __len__(self) -> int:
        return len(self.rules)


# ============================================================================
# DATABASE RULES
# ============================================================================

STD_PREFIX = "(generalpurpose|basic|memoryoptimized)-"
SQL_PREFIX = "elastic-vcore-"

TIER_SHORT_NAMES = {
    "generalpurpose": "gp",
    "general-purpose": "gp",
    "memoryoptimized": "mo",
    "business-critical": "bc",
}


def to_simple_name(tier: str) -> str:
    """Short tier name: generalpurpose -> gp, business-critical -> bc."""
    return TIER_SHORT_NAMES.get(tier, tier)


def _storage(*codes: str) -> Extractor:
    return lambda m: StorageRole(tuple(codes))


STD_STORAGE_RULES = RuleTable([
    (STD_PREFIX + "backup-(lrs|grs)", lambda m: StorageRole(("db-backup-" + m.group(2),))),
    (STD_PREFIX + "storage",
     lambda m: StorageRole(("db-standard" if m.group(1) == "basic" else "db-premium",))),
])

STD_COMPUTE_RULES = RuleTable([
    (STD_PREFIX + r"compute-g(\d+)-(\d+)",
     lambda m: ComputeRole(to_simple_name(m.group(1)), int(m.group(2)), int(m.group(3)))),
])

SQL_STORAGE_RULES = RuleTable([
    (SQL_PREFIX + "backup", _storage("db-backup-lrs")),
    ("managed-instance-pitr-backup-storage-ra-grs", _storage("db-backup-grs")),
    (SQL_PREFIX + "general-purpose-storage", _storage("sql-gp")),
    (SQL_PREFIX + "business-critical-storage",
     _storage("sql-bc-4", "sql-bc-5", "sql-bc-5-8", "sql-bc-5-24")),
])

SQL_COMPUTE_RULES = RuleTable([
    (SQL_PREFIX + r"(business-critical|general-purpose)-gen(\d+)-(\d+)(-.*)?",
     lambda m: ComputeRole("sql-" + to_simple_name(m.group(1)), int(m.group(2)), int(m.group(3)))),
])


@dataclass(frozen=True)
class DatabaseEngine:
    """A database catalog: API path, engine label and decoding tables."""
    path: str
    engine: str
    storage_rules: RuleTable
    compute_rules: RuleTable
    edition: Optional[str] = None
    storage_engine: Optional[str] = None


DATABASE_ENGINES: Tuple[DatabaseEngine, ...] = (
    DatabaseEngine("mysql", "MYSQL", STD_STORAGE_RULES, STD_COMPUTE_RULES),
    DatabaseEngine("mariadb", "MARIADB", STD_STORAGE_RULES, STD_COMPUTE_RULES),
    DatabaseEngine("postgresql", "POSTGRESQL", STD_STORAGE_RULES, STD_COMPUTE_RULES),
    DatabaseEngine("sql-database", "SQL SERVER", SQL_STORAGE_RULES, SQL_COMPUTE_RULES,
                   edition="ENTERPRISE", storage_engine="SQL SERVER"),
)

STORAGE_DIMENSION = "pergb"


def decode_database_offer(engine: DatabaseEngine, offer_id: str, dimensions) -> Optional[Role]:
    """
    Decode a database offer.

    Offers priced per GB only go through the storage rules, the others
    only through the compute rules.
    """
    if STORAGE_DIMENSION in dimensions:
        return engine.storage_rules.decode(offer_id)
    return engine.compute_rules.decode(offer_id)


def is_ignored_database_sku(sku: str) -> bool:
    """DTU, hyperscale, managed instance and software SKUs are not imported."""
    return ("-software-" in sku or "-dtu-" in sku
            or sku.startswith("hyperscale") or sku.startswith("managed"))


# ============================================================================
# COMPUTE DECODING
# ============================================================================

VM_OS = ("LINUX", "WINDOWS", "RHEL", "SUSE", "CENTOS", "DEBIAN", "UBUNTU", "ORACLE")
DEFAULT_OS = "WINDOWS"


def to_os(name: str) -> Optional[str]:
    os = name.replace("redhat", "RHEL").replace("sles", "SUSE").upper()
    return os if os in VM_OS else None


def find_os(parts: Sequence[str]) -> Optional[str]:
    """First part naming a known OS."""
    for part in parts:
        os = to_os(part)
        if os:
            return os
    return None


@dataclass(frozen=True)
class VmOfferKey:
    """Decoded compute offer identifier, e.g. 'linux-ds4v2-standard'."""
    os: Optional[str]
    size: Optional[str]
    basic: bool
    low_priority: bool

    @property
    def type_code(self) -> Optional[str]:
        if self.size is None:
            return None
        code = self.size.lower()
        return code + "-b" if self.basic else code


def decode_vm_offer(offer_id: str) -> VmOfferKey:
    parts = offer_id.split("-")
    trimmed = offer_id.replace("-lowpriority", "")
    return VmOfferKey(
        os=find_os(parts),
        size=parts[1] if len(parts) > 1 else None,
        basic=trimmed.endswith("-basic"),
        low_priority="-lowpriority" in offer_id,
    )


def decode_software(sku: str, software_by_id: Dict[str, Optional[str]]) -> Optional[str]:
    """Software of a SKU, from the most to the least specific prefix."""
    for slug in sorted(software_by_id, reverse=True):
        if sku.startswith(slug):
            name = software_by_id[slug] or slug
            return name.upper()
    return None


# ============================================================================
# COMPONENTS
# ============================================================================

COMPONENT_SEPARATOR = "--"


def split_component(component: str) -> Optional[Tuple[str, str]]:
    """'<offerId>--<dimension>' -> (offerId, dimension), None when malformed."""
    parts = component.split(COMPONENT_SEPARATOR)
    if len(parts) != 2:
        return None
    return parts[0], parts[1]
