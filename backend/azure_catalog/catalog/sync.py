"""
Catalog sync orchestration.

Runs the category importers in a fixed order against one run context:
base regions, compute, database, disk, support. Each category is committed
on its own; an I/O failure rolls back the failing category, records it in
the import log and propagates.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Type

import structlog
from sqlalchemy.orm import Session

from azure_catalog.catalog.client import CatalogClient
from azure_catalog.catalog.context import UpdateContext
from azure_catalog.catalog.enablement import EnablementPatterns
from azure_catalog.catalog.importers.base import AbstractAzureImport
from azure_catalog.catalog.importers.database import DatabaseImport
from azure_catalog.catalog.importers.disk import DiskImport
from azure_catalog.catalog.importers.locations import LocationImport
from azure_catalog.catalog.importers.support import SupportImport
from azure_catalog.catalog.importers.vm import VmImport
from azure_catalog.config import Settings, settings as default_settings
from azure_catalog.exceptions import CatalogFetchError
from azure_catalog.models.models import CatalogImportLog

logger = structlog.get_logger(__name__)

IMPORTERS: List[Type[AbstractAzureImport]] = [
    LocationImport,
    VmImport,
    DatabaseImport,
    DiskImport,
    SupportImport,
]


@dataclass
class CategoryResult:
    """Outcome of one category import."""
    category: str
    processed: int = 0
    purged: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncSummary:
    """Outcome of a sync run."""
    node: str
    force: bool
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    categories: Dict[str, CategoryResult] = field(default_factory=dict)

    @property
    def processed(self) -> int:
        return sum(c.processed for c in self.categories.values())

    @property
    def purged(self) -> int:
        return sum(c.purged for c in self.categories.values())

    def to_dict(self) -> Dict:
        return {
            "node": self.node,
            "force": self.force,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "processed": self.processed,
            "purged": self.purged,
            "categories": {
                name: {"processed": c.processed, "purged": c.purged, "error": c.error}
                for name, c in self.categories.items()
            },
        }


class CatalogSync:
    """
    Entry point of a catalog synchronization.

    Usage:
        with get_sync_session() as db, CatalogClient() as client:
            summary = CatalogSync(db, client=client).sync(force=False)
    """

    def __init__(self, db: Session, settings: Optional[Settings] = None,
                 client: Optional[CatalogClient] = None):
        self.db = db
        self.settings = settings or default_settings
        self.client = client or CatalogClient(self.settings)
        self.logger = logger.bind(component="catalog_sync")

    def create_context(self, force: bool) -> UpdateContext:
        """
        Build a fresh run context.

        Raises:
            ConfigurationError: When an enablement pattern is invalid
        """
        return UpdateContext(
            node=self.settings.node,
            patterns=EnablementPatterns.compile(self.settings),
            force=force,
            hours_month=self.settings.hours_month,
        )

    def sync(self, force: bool = False) -> SyncSummary:
        """
        Synchronize the persisted catalog with the remote one.

        Args:
            force: Re-merge the descriptive attributes of existing prices

        Returns:
            Per category counts

        Raises:
            ConfigurationError: Before any fetch, on an invalid pattern
            CatalogFetchError: When a document cannot be read; categories
                imported before it stay committed
        """
        context = self.create_context(force)
        summary = SyncSummary(node=context.node, force=force)
        self.logger.info("sync_started", node=context.node, force=force)

        for importer_class in IMPORTERS:
            importer = importer_class(self.db, self.client, context)
            summary.categories[importer.category] = self._run(importer)

        summary.completed_at = datetime.utcnow()
        self.logger.info(
            "sync_completed",
            node=context.node,
            processed=summary.processed,
            purged=summary.purged
        )
        return summary

    def _run(self, importer: AbstractAzureImport) -> CategoryResult:
        """Run one importer and commit it, or roll it back on I/O failure."""
        entry = CatalogImportLog(
            node=importer.context.node,
            category=importer.category,
            status="started",
            force=importer.context.force,
            started_at=datetime.utcnow(),
        )
        try:
            importer.install()
        except CatalogFetchError as e:
            self.db.rollback()
            e.category = importer.category
            self.logger.error("category_failed", category=importer.category, url=e.url, error=e.reason)
            entry.status = "failed"
            entry.error_message = str(e)
            entry.completed_at = datetime.utcnow()
            self.db.add(entry)
            self.db.commit()
            raise

        entry.status = "completed"
        entry.records_processed = importer.processed
        entry.records_purged = importer.purged
        entry.completed_at = datetime.utcnow()
        self.db.add(entry)
        self.db.commit()
        self.logger.info(
            "category_completed",
            category=importer.category,
            processed=importer.processed,
            purged=importer.purged
        )
        return CategoryResult(importer.category, importer.processed, importer.purged)
