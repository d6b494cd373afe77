"""Open Food Facts API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_SEARCH_FIELDS = (
    "code",
    "_id",
    "product_name",
    "product_name_{lc}",
    "generic_name",
    "generic_name_{lc}",
    "abbreviated_product_name",
    "brands",
    "nutriments",
    "nutrition_grades",
    "nutriscore_grade",
    "image_front_small_url",
    "image_small_url",
)

_PRODUCT_FIELDS = (
    "code",
    "product_name",
    "product_name_{lc}",
    "generic_name",
    "generic_name_{lc}",
    "brands",
    "nutriments",
    "nutrition_grades",
    "image_front_small_url",
)

_NOT_FOUND = 404


class FoodDatabaseClient(Protocol):
    """Interface for the external food database."""

    async def search_products(self, query: str, page_size: int) -> dict[str, object]:
        """Search products by free text and return raw API data."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(FoodDatabaseClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    user_agent: str
    locale: str
    timeout_seconds: float
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls,
        base_url: str,
        user_agent: str,
        locale: str = "de",
        timeout_seconds: float = 8.0,
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            user_agent=user_agent,
            locale=locale,
            timeout_seconds=timeout_seconds,
            http_client=httpx.AsyncClient(),
        )

    async def search_products(self, query: str, page_size: int) -> dict[str, object]:
        """Search products sorted by popularity."""
        response = await self.http_client.get(
            f"{self.base_url}/cgi/search.pl",
            params={
                "search_terms": query,
                "search_simple": "1",
                "action": "process",
                "json": "1",
                "lc": self.locale,
                "cc": self.locale,
                "page_size": str(page_size),
                "sort_by": "unique_scans_n",
                "fields": self._fields(_SEARCH_FIELDS),
            },
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product; unknown barcodes come back with status 0."""
        response = await self.http_client.get(
            f"{self.base_url}/api/v2/product/{barcode}.json",
            params={"fields": self._fields(_PRODUCT_FIELDS), "lc": self.locale},
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout_seconds,
        )
        if response.status_code == _NOT_FOUND:
            return {"status": 0}
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _fields(self, names: tuple[str, ...]) -> str:
        return ",".join(name.format(lc=self.locale) for name in names)
