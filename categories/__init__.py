"""Category registry, matching and dynamic categorization.

CategoryRegistry:
    Immutable catalog of categories, validated once at load.

CategoryMatcher:
    Two-tier keyword affinity with contextual boosts and adaptive thresholds.

DynamicCategorizer:
    Scores items and drives the FIRST_PASS -> SECOND_PASS -> DEDUPLICATED
    -> CAPPED -> SORTED state machine.

split_sections / sections_to_items:
    Turn synthesized answer text into categorizable items.

Example:
    >>> from categories import DynamicCategorizer, default_registry
    >>> categorizer = DynamicCategorizer(default_registry())
"""

from categories.registry import CategoryRegistry, RegistryError, default_registry, load_registry
from categories.matcher import CategoryMatcher, apply_boost
from categories.categorizer import (
    CategorizationRun,
    CategorizerState,
    DynamicCategorizer,
    ScoredItem,
    StateError,
)
from categories.sections import Section, sections_to_items, split_sections

__all__ = [
    "CategoryRegistry",
    "RegistryError",
    "default_registry",
    "load_registry",
    "CategoryMatcher",
    "apply_boost",
    "CategorizationRun",
    "CategorizerState",
    "DynamicCategorizer",
    "ScoredItem",
    "StateError",
    "Section",
    "sections_to_items",
    "split_sections",
]
