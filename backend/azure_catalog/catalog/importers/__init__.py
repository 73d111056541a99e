"""Category importers."""
from azure_catalog.catalog.importers.base import AbstractAzureImport
from azure_catalog.catalog.importers.database import DatabaseImport
from azure_catalog.catalog.importers.disk import DiskImport
from azure_catalog.catalog.importers.locations import LocationImport
from azure_catalog.catalog.importers.support import SupportImport
from azure_catalog.catalog.importers.vm import VmImport

__all__ = [
    "AbstractAzureImport",
    "DatabaseImport",
    "DiskImport",
    "LocationImport",
    "SupportImport",
    "VmImport",
]
