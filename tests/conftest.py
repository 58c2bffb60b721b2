from datetime import datetime, timezone

import pytest

from categories.registry import CategoryRegistry, default_registry
from config import Config
from models.category import Category

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)

AI_ITEM = {
    "title": "VC funding surges in AI",
    "content": (
        "Global investment in AI startups showed strong growth in 2025, "
        "with venture capital funding up sharply."
    ),
}
BREAD_ITEM = {"title": "Recipe for bread", "content": "flour, yeast, water"}


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def registry():
    return default_registry()


def word_category(word: str, priority: int = 2, **kwargs) -> Category:
    """A category that matches items mentioning a single word (affinity 0.85)."""
    return Category(
        id=word,
        name=word.title(),
        priority=priority,
        primary_keywords=(word,),
        secondary_keywords=(word,),
        **kwargs,
    )


@pytest.fixture
def word_registry():
    """Eight single-word categories plus the fallback bucket."""
    words = ("alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel")
    categories = [word_category(w) for w in words]
    categories.append(Category(id="general", name="General Results", priority=5, fallback=True))
    categories.append(Category(id="all", name="All Results", priority=99, catch_all=True))
    return CategoryRegistry(categories)


@pytest.fixture
def sample_items():
    return [dict(AI_ITEM), dict(BREAD_ITEM)]
