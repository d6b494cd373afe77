"""Food search against the external food database, with response normalization."""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from fitpro.adapters.off_client import FoodDatabaseClient
from fitpro.domain.nutrition import FoodCandidate, round1, round_int
from fitpro.services.cache import Cache

MIN_QUERY_LENGTH = 2
KJ_PER_KCAL = 4.184

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable


class FoodSearchError(RuntimeError):
    """The food database could not be reached or returned an error."""


@dataclass
class FoodSearchService:
    """Searches foods by text or barcode and normalizes the results."""

    client: FoodDatabaseClient
    cache: Cache
    locale: str = "de"
    page_size: int = 24
    search_ttl_seconds: int = 3600

    async def search(self, query: str) -> list[FoodCandidate]:
        """Search foods by name; short queries return nothing without a request."""
        cleaned = query.strip()
        if len(cleaned) < MIN_QUERY_LENGTH:
            return []
        cache_key = f"off:search:{self.locale}:{cleaned.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call(
            self.client.search_products(cleaned, page_size=self.page_size),
            action=f"search:{cleaned}",
        )
        products = payload.get("products") or []
        foods = [
            food
            for food in (normalize_product(item, self.locale) for item in products)
            if food is not None
        ]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        _logger.info("Food search: query=%s results=%s", cleaned, len(foods))
        return foods

    async def lookup_barcode(self, barcode: str) -> FoodCandidate | None:
        """Return the product for a barcode, or None when it is unknown."""
        cleaned = barcode.strip()
        if not cleaned:
            return None
        payload = await self._call(
            self.client.get_product(cleaned), action=f"barcode:{cleaned}"
        )
        product = payload.get("product")
        if payload.get("status") not in (1, "1") or not isinstance(product, dict):
            return None
        return normalize_product({**product, "code": cleaned}, self.locale)

    async def _call(
        self, request: "Awaitable[dict[str, object]]", *, action: str
    ) -> dict[str, object]:
        try:
            payload = await request
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning(
                "Food database %s failed (status=%s): %s",
                action,
                _status_code_from_exception(exc),
                exc,
            )
            raise FoodSearchError("search failed") from exc
        if not isinstance(payload, dict):
            raise FoodSearchError("search failed")
        return payload


@dataclass(frozen=True)
class SearchOutcome:
    """Result of a debounced search; ``failed`` is distinct from no results."""

    query: str
    results: list[FoodCandidate]
    failed: bool = False


@dataclass
class SearchDebouncer:
    """Runs only the latest query after a quiet period.

    A submission superseded by a newer one resolves to None, including when
    its request already completed.
    """

    service: FoodSearchService
    delay_seconds: float = 0.35
    _generation: int = field(default=0, init=False)

    async def submit(self, query: str) -> SearchOutcome | None:
        """Schedule a search and return its outcome unless superseded."""
        self._generation += 1
        generation = self._generation
        if len(query.strip()) < MIN_QUERY_LENGTH:
            return SearchOutcome(query=query, results=[])

        await asyncio.sleep(self.delay_seconds)
        if generation != self._generation:
            return None
        try:
            outcome = SearchOutcome(
                query=query, results=await self.service.search(query)
            )
        except FoodSearchError:
            outcome = SearchOutcome(query=query, results=[], failed=True)
        if generation != self._generation:
            return None
        return outcome


def normalize_product(product: object, locale: str = "de") -> FoodCandidate | None:
    """Map a raw product onto a FoodCandidate, or None if it has no usable data."""
    if not isinstance(product, dict):
        return None
    name = _first_text(
        product,
        (
            f"product_name_{locale}",
            "product_name",
            f"generic_name_{locale}",
            "generic_name",
            "abbreviated_product_name",
        ),
    )
    if not name:
        return None

    nutriments = product.get("nutriments") or product.get("nutrient_levels") or {}
    if not isinstance(nutriments, dict):
        nutriments = {}
    calories = _calories(nutriments)
    protein = _macro(nutriments, ("proteins_100g", "proteins")) or 0.0
    carbs = _macro(nutriments, ("carbohydrates_100g", "carbohydrates")) or 0.0
    fat = _macro(nutriments, ("fat_100g", "fat")) or 0.0
    if not (calories > 0 or protein > 0 or carbs > 0 or fat > 0):
        return None

    fiber = _macro(nutriments, ("fiber_100g", "fiber"))
    sugar = _macro(nutriments, ("sugars_100g", "sugars"))
    brands = _first_text(product, ("brands",))
    return FoodCandidate(
        barcode=_first_text(product, ("code", "_id", "id")) or "",
        name=name,
        brand=_first_brand(brands),
        image_url=_first_text(
            product, ("image_front_small_url", "image_small_url", "image_url")
        ),
        calories=calories,
        protein_g=protein,
        carbs_g=carbs,
        fat_g=fat,
        fiber_g=fiber,
        sugar_g=sugar,
        nutriscore=_first_text(
            product, ("nutrition_grades", "nutriscore_grade", "nutriscore")
        ),
    )


def scale_per_100g(value: float, grams: float) -> float:
    """Scale a per-100 g value to a portion, rounded to one decimal."""
    return round1(value * grams / 100)


def to_per_100g(value: float, grams: float) -> float:
    """Convert a portion value back to per 100 g, rounded to one decimal."""
    if grams <= 0:
        return 0.0
    return round1(value * 100 / grams)


def _calories(nutriments: dict[str, object]) -> int:
    kcal = _first_number(nutriments, ("energy-kcal_100g", "energy-kcal"))
    if kcal and kcal > 0:
        return round_int(kcal)
    kj = _first_number(
        nutriments, ("energy-kj_100g", "energy_100g", "energy-kj", "energy")
    )
    if kj and kj > 0:
        return round_int(kj / KJ_PER_KCAL)
    return 0


def _macro(data: dict[str, object], keys: tuple[str, ...]) -> float | None:
    value = _first_number(data, keys)
    if value is None:
        return None
    return round1(max(0.0, value))


def _first_number(data: dict[str, object], keys: tuple[str, ...]) -> float | None:
    for key in keys:
        value = _to_number(data.get(key))
        if value is not None:
            return value
    return None


def _first_text(data: dict[str, object], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = data.get(key)
        if value is None or isinstance(value, bool):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _first_brand(brands: str | None) -> str | None:
    if not brands:
        return None
    return brands.split(",")[0].strip() or None


def _to_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
