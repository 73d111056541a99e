"""
Bundled static reference data.

Region enrichment, database RAM per vCore, rating tables and the CSV
baselines for storage and support. Read once per process.
"""
import csv
import json
import re
from functools import lru_cache
from pathlib import Path
from re import Pattern
from typing import Any, Dict, List, Optional, Tuple

# file: backend/azure_catalog/core/reference.py
DATA_DIR = Path(__file__).resolve().parents[1] / "data"
CSV_DIR = DATA_DIR / "csv"

REGIONS_FILE = DATA_DIR / "azure-regions.json"
DATABASE_RAM_FILE = DATA_DIR / "azure-database-ram.json"
DB_STORAGE_TYPE_FILE = CSV_DIR / "azure-db-storage-type.csv"
SUPPORT_TYPE_FILE = CSV_DIR / "azure-prov-support-type.csv"
SUPPORT_PRICE_FILE = CSV_DIR / "azure-prov-support-price.csv"

DEFAULT_RATE = "MEDIUM"


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _read_csv(path: Path) -> List[Dict[str, Optional[str]]]:
    """Read a CSV table, blank cells become None."""
    with open(path, encoding="utf-8", newline="") as f:
        return [
            {k: (v.strip() or None) if v is not None else None for k, v in row.items()}
            for row in csv.DictReader(f)
        ]


@lru_cache(maxsize=None)
def load_regions() -> Dict[str, Dict[str, Any]]:
    """Region code -> enrichment attributes (name, M49 codes, coordinates)."""
    return _read_json(REGIONS_FILE)


@lru_cache(maxsize=None)
def load_database_ram() -> Dict[str, float]:
    """`<engine>-gen<g>` or tier -> RAM GiB per vCore."""
    return {k: float(v) for k, v in _read_json(DATABASE_RAM_FILE).items()}


@lru_cache(maxsize=None)
def load_rates(kind: str) -> Tuple[Tuple[Pattern, str], ...]:
    """
    Load an ordered rating table.

    Args:
        kind: Table name, e.g. 'cpu', 'ram', 'network'

    Returns:
        (compiled pattern, rating) pairs in file order
    """
    mapping = _read_json(DATA_DIR / f"rate-{kind}.json")
    return tuple(
        (re.compile(pattern), rating)
        for rating, patterns in mapping.items()
        for pattern in patterns
    )


def get_rate(kind: str, name: str) -> str:
    """Rating of a type name in a table, MEDIUM when nothing matches."""
    for pattern, rating in load_rates(kind):
        if pattern.fullmatch(name):
            return rating
    return DEFAULT_RATE


@lru_cache(maxsize=None)
def load_db_storage_types() -> Dict[str, Dict[str, Optional[str]]]:
    """Database storage type code -> baseline attributes."""
    return {row["code"]: row for row in _read_csv(DB_STORAGE_TYPE_FILE)}


@lru_cache(maxsize=None)
def load_support_types() -> Tuple[Dict[str, Optional[str]], ...]:
    return tuple(_read_csv(SUPPORT_TYPE_FILE))


@lru_cache(maxsize=None)
def load_support_prices() -> Tuple[Dict[str, Optional[str]], ...]:
    return tuple(_read_csv(SUPPORT_PRICE_FILE))
