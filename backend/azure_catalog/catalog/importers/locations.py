"""
Base metadata import: regions already persisted for the enabled region codes.
"""
from azure_catalog.catalog.importers.base import AbstractAzureImport
from azure_catalog.models.models import Region


class LocationImport(AbstractAzureImport):
    """Seed the run context with the persisted enabled regions."""

    category = "base"

    def install(self) -> None:
        self.next_step("initialize")
        regions = self.resolver.load(Region, "name")
        self.context.regions.update(
            (code, region) for code, region in regions.items()
            if self.context.is_enabled_region(code)
        )
        self.processed = len(self.context.regions)
        self.logger.info("loaded_regions", enabled=self.processed, persisted=len(regions))
