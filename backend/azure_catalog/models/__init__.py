"""Database models."""
from azure_catalog.db.database import Base
from azure_catalog.models.models import (
    Region,
    PriceTerm,
    InstanceType,
    DatabaseType,
    StorageType,
    SupportType,
    InstancePrice,
    DatabasePrice,
    StoragePrice,
    SupportPrice,
    QuoteInstance,
    QuoteDatabase,
    QuoteStorage,
    QuoteSupport,
    CatalogImportLog,
)

__all__ = [
    "Base",
    "Region",
    "PriceTerm",
    "InstanceType",
    "DatabaseType",
    "StorageType",
    "SupportType",
    "InstancePrice",
    "DatabasePrice",
    "StoragePrice",
    "SupportPrice",
    "QuoteInstance",
    "QuoteDatabase",
    "QuoteStorage",
    "QuoteSupport",
    "CatalogImportLog",
]
