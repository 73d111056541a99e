"""
Azure calculator pricing API client.
Downloads the catalog documents consumed by the importers.
"""
import json
from typing import Any, Dict, Optional

import httpx
import structlog

from azure_catalog.config import Settings, settings as default_settings
from azure_catalog.exceptions import CatalogFetchError

logger = structlog.get_logger(__name__)


class CatalogClient:
    """
    HTTP client for the calculator endpoints.

    A non-2xx answer or an empty body yields an empty document; only raw
    transport failures and unreadable JSON raise.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.Client] = None):
        self.settings = settings or default_settings
        self.base_url = self.settings.prices_url

        # HTTP client with retry logic
        self.client = client or httpx.Client(
            timeout=self.settings.http_timeout,
            follow_redirects=True,
            transport=httpx.HTTPTransport(retries=self.settings.http_retries)
        )
        self.logger = logger.bind(component="catalog_client")

    def calculator_url(self, path: str) -> str:
        """URL of a calculator document, e.g. 'virtual-machines'."""
        return f"{self.base_url}/{path}/calculator/"

    def get_json(self, url: str) -> Dict[str, Any]:
        """
        Fetch and parse a JSON document.

        Args:
            url: Absolute document URL

        Returns:
            Parsed document, {} when unavailable

        Raises:
            CatalogFetchError: On transport failure or unreadable JSON
        """
        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.logger.warning(
                "catalog_unavailable",
                url=url,
                status_code=e.response.status_code
            )
            return {}
        except httpx.TransportError as e:
            raise CatalogFetchError(url, str(e)) from e

        if not response.content.strip():
            self.logger.warning("catalog_empty", url=url)
            return {}

        try:
            document = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CatalogFetchError(url, f"invalid JSON: {e}") from e

        self.logger.info("fetched_catalog", url=url, size=len(response.content))
        return document if isinstance(document, dict) else {}

    def get_calculator(self, path: str) -> Dict[str, Any]:
        return self.get_json(self.calculator_url(path))

    def close(self):
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
