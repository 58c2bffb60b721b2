import json

import pytest

from categories.catalog import DEFAULT_CATEGORIES
from categories.registry import CategoryRegistry, RegistryError, load_registry
from models.category import Category


def test_default_catalog_shape(registry):
    assert len(registry) == 26
    assert len(registry.thematic) == 24
    assert registry.fallback.id == "general"
    assert registry.fallback.priority == 5
    assert registry.catch_all.id == "all"
    assert registry.get("investmentTrends").priority == 0
    assert "keyInsights" in registry
    assert registry.order("keyInsights") == 0


def test_missing_or_empty_registry_fails():
    with pytest.raises(RegistryError):
        CategoryRegistry(None)
    with pytest.raises(RegistryError):
        CategoryRegistry([])


def test_duplicate_ids_fail():
    with pytest.raises(RegistryError, match="Duplicate"):
        CategoryRegistry([Category(id="a", name="A"), Category(id="a", name="Again")])


def test_single_fallback_and_catch_all():
    with pytest.raises(RegistryError):
        CategoryRegistry([
            Category(id="t", name="T"),
            Category(id="f1", name="F1", fallback=True),
            Category(id="f2", name="F2", fallback=True),
        ])
    with pytest.raises(RegistryError):
        CategoryRegistry([Category(id="both", name="Both", fallback=True, catch_all=True)])


def test_registry_needs_a_thematic_category():
    with pytest.raises(RegistryError, match="thematic"):
        CategoryRegistry([Category(id="general", name="General", fallback=True)])


def test_keywords_are_normalized():
    category = Category(id="x", name="X", primary_keywords=["Growth", "growth ", "ESG"])
    assert category.primary_keywords == ("growth", "esg")


def test_load_registry_from_json(tmp_path):
    path = tmp_path / "categories.json"
    entries = [c.model_dump() for c in DEFAULT_CATEGORIES[:3]]
    path.write_text(json.dumps({"categories": entries}))
    registry = load_registry(path)
    assert [c.id for c in registry] == ["keyInsights", "investmentTrends", "marketOverview"]
    assert registry.fallback is None


def test_load_registry_rejects_bad_files(tmp_path):
    missing = tmp_path / "missing.json"
    with pytest.raises(RegistryError):
        load_registry(missing)

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([{"id": "", "name": "Nameless id"}]))
    with pytest.raises(RegistryError, match="index 0"):
        load_registry(bad)
