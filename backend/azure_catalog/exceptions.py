"""
Catalog sync exceptions.

Only configuration and I/O failures leave the sync; everything decoded
from a malformed catalog entry is logged and skipped by the importers.
"""
from typing import Optional


class CatalogSyncError(Exception):
    """Base class for catalog sync failures."""
    pass


class ConfigurationError(CatalogSyncError):
    """
    Raised when an enablement pattern cannot be compiled.

    Detected before any fetch; the whole run is aborted.
    """

    def __init__(self, setting: str, pattern: str, reason: str):
        self.setting = setting
        self.pattern = pattern
        self.reason = reason
        super().__init__(
            f"Invalid pattern for '{setting}': {pattern!r} ({reason})"
        )


class CatalogFetchError(CatalogSyncError, IOError):
    """
    Raised when a catalog document cannot be read at all.

    Aborts the current category only; categories already committed
    stay committed.
    """

    def __init__(self, url: str, reason: str, category: Optional[str] = None):
        self.url = url
        self.reason = reason
        self.category = category
        super().__init__(f"Unable to read catalog document {url}: {reason}")
