"""Category registry.

The registry is the read-only catalog every matcher and categorizer is built
from. It is validated once at construction; any problem (no categories,
duplicate ids, more than one fallback or catch-all) raises RegistryError,
which is a configuration-time failure rather than something a categorization
run ever has to handle.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from pydantic import ValidationError

from categories.catalog import DEFAULT_CATEGORIES
from models.category import Category

logger = logging.getLogger(__name__)


class RegistryError(ValueError):
    """Raised when a category registry is missing or misconfigured."""


class CategoryRegistry:
    """Immutable, ordered collection of categories.

    Example:
        >>> registry = CategoryRegistry(DEFAULT_CATEGORIES)
        >>> registry.get("investmentTrends").priority
        0
        >>> registry.fallback.name
        'General Results'
    """

    def __init__(self, categories: Iterable[Category]):
        """Validate and freeze the catalog.

        Args:
            categories: Category definitions in display-tiebreak order

        Raises:
            RegistryError: If the catalog is empty or inconsistent
        """
        if categories is None:
            raise RegistryError("Category registry is missing")
        entries = tuple(categories)
        if not entries:
            raise RegistryError("Category registry is empty")

        by_id: dict[str, Category] = {}
        for category in entries:
            if not isinstance(category, Category):
                raise RegistryError(f"Invalid registry entry: {category!r}")
            if category.id in by_id:
                raise RegistryError(f"Duplicate category id '{category.id}'")
            by_id[category.id] = category

        fallbacks = [c for c in entries if c.fallback]
        catch_alls = [c for c in entries if c.catch_all]
        if len(fallbacks) > 1:
            raise RegistryError("Only one fallback category is allowed")
        if len(catch_alls) > 1:
            raise RegistryError("Only one catch-all category is allowed")
        if any(c.fallback and c.catch_all for c in entries):
            raise RegistryError("A category cannot be both fallback and catch-all")
        if not any(not c.is_special for c in entries):
            raise RegistryError("Registry has no thematic categories")

        self._categories = entries
        self._by_id = by_id
        self._order = {c.id: i for i, c in enumerate(entries)}
        self._fallback = fallbacks[0] if fallbacks else None
        self._catch_all = catch_alls[0] if catch_alls else None

    @classmethod
    def from_mappings(cls, entries: Iterable[Mapping[str, Any]]) -> "CategoryRegistry":
        """Build a registry from plain mappings (e.g. parsed JSON).

        Raises:
            RegistryError: If an entry is invalid or the catalog is inconsistent
        """
        categories = []
        for i, entry in enumerate(entries or ()):
            try:
                categories.append(Category.model_validate(entry))
            except ValidationError as e:
                raise RegistryError(f"Invalid category at index {i}: {e}") from e
        return cls(categories)

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def get(self, category_id: str) -> Category | None:
        return self._by_id.get(category_id)

    def order(self, category_id: str) -> int:
        """Position of a category in the catalog (used as the last tiebreak)."""
        return self._order.get(category_id, len(self._categories))

    @property
    def thematic(self) -> tuple[Category, ...]:
        """Categories that compete in matching."""
        return tuple(c for c in self._categories if not c.is_special)

    @property
    def fallback(self) -> Category | None:
        return self._fallback

    @property
    def catch_all(self) -> Category | None:
        return self._catch_all

    def __repr__(self) -> str:
        return f"CategoryRegistry(categories={len(self._categories)})"


def load_registry(path: str | Path) -> CategoryRegistry:
    """Load a registry from a JSON file holding a list of category objects.

    Raises:
        RegistryError: If the file is unreadable or its content is invalid
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise RegistryError(f"Cannot load category registry from {path}: {e}") from e
    if isinstance(data, Mapping):
        data = data.get("categories")
    if not isinstance(data, list):
        raise RegistryError(f"Registry file {path} must contain a list of categories")
    registry = CategoryRegistry.from_mappings(data)
    logger.info("Category registry loaded | path=%s categories=%d", path, len(registry))
    return registry


@lru_cache(maxsize=1)
def default_registry() -> CategoryRegistry:
    """The built-in catalog, loaded once per process."""
    return CategoryRegistry(DEFAULT_CATEGORIES)
