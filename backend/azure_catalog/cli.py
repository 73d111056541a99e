"""
Manual trigger of the catalog sync.
Can be run from cron or by hand: `azure-catalog-sync --force`
"""
import json
import sys

import structlog
import typer

from azure_catalog.catalog.client import CatalogClient
from azure_catalog.catalog.sync import CatalogSync
from azure_catalog.config import settings
from azure_catalog.core.logging import configure_logging
from azure_catalog.db.database import get_sync_session, init_db
from azure_catalog.exceptions import CatalogSyncError

logger = structlog.get_logger()

app = typer.Typer(
    name="azure-catalog-sync",
    help="Synchronize the Azure pricing catalog into the local database.",
    add_completion=False,
)


@app.command()
def sync(
    force: bool = typer.Option(False, "--force", help="Re-merge descriptive fields of existing prices"),
    create_tables: bool = typer.Option(True, help="Create missing tables before the run"),
) -> None:
    """Run one catalog synchronization."""
    configure_logging(settings.log_level, settings.log_json)
    if create_tables:
        init_db()

    try:
        with get_sync_session() as db, CatalogClient(settings) as client:
            summary = CatalogSync(db, settings, client).sync(force=force)
    except CatalogSyncError as e:
        logger.error("catalog_sync_failed", error=str(e))
        sys.exit(1)

    typer.echo(json.dumps(summary.to_dict(), indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
