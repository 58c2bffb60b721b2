import asyncio
import json
import math

import pytest

from categories.registry import CategoryRegistry
from config import Config
from models.category import Category
from pipeline import CategorizeOptions, Pipeline, categorize, filter_presentable
from tests.conftest import AI_ITEM, BREAD_ITEM, NOW


@pytest.fixture
def pipeline(registry):
    return Pipeline(Config(), registry)


def _dump(results):
    return json.dumps([r.to_dict() for r in results], sort_keys=True)


@pytest.mark.parametrize("items", [None, "not a list", {"title": "x"}, 42, []])
def test_non_list_or_empty_input_returns_empty(pipeline, items):
    assert pipeline.categorize(items, "AI investment trends 2025") == []


def test_invalid_items_are_skipped(pipeline, sample_items):
    items = [None, 5, {"title": ""}, {"url": "https://x.com"}] + sample_items
    results = pipeline.categorize(items, "AI investment trends 2025", {"now": NOW})
    assert sum(len(r.content) for r in results) == 2
    assert pipeline.last_stats.received == 6
    assert pipeline.last_stats.skipped == 4


def test_investment_query_example(pipeline, sample_items):
    results = pipeline.categorize(sample_items, "AI investment trends 2025", {"now": "2025-06-01"})
    assert len(results) <= 6
    assert [r.name for r in results] == ["Investment Trends", "General Results"]
    assert results[0].priority == 0
    assert results[0].content[0].metrics.relevance >= 70
    assert results[1].content[0].title == "Recipe for bread"

    stats = pipeline.last_stats
    assert (stats.first_pass, stats.second_pass, stats.fallback) == (1, 0, 1)
    assert stats.labels[0] == "business"


def test_output_shape(pipeline, sample_items):
    data = pipeline.categorize(sample_items, "AI investment trends 2025", {"now": NOW})[0].to_dict()
    assert set(data) == {"id", "name", "description", "priority", "metrics", "content"}
    assert set(data["metrics"]) == {"relevance", "accuracy", "credibility", "overall"}
    item = data["content"][0]
    assert item["_categoryScore"] == 83
    assert item["_metrics"]["relevance"] == 76


def test_runs_are_deterministic(pipeline, sample_items):
    first = pipeline.categorize(sample_items, "AI investment trends 2025", {"now": NOW})
    second = pipeline.categorize(sample_items, "AI investment trends 2025", {"now": NOW})
    assert _dump(first) == _dump(second)


def test_async_matches_sync(pipeline, sample_items):
    items = sample_items * 3 + [
        {"title": f"Startup funding round {i}", "content": "venture capital investment growth",
         "url": f"https://news.example.com/{i}"}
        for i in range(10)
    ]
    options = CategorizeOptions(now=NOW)
    sync = pipeline.categorize(items, "AI investment trends 2025", options)
    concurrent = asyncio.run(
        pipeline.categorize_async(items, "AI investment trends 2025", options, max_concurrent=3)
    )
    assert _dump(sync) == _dump(concurrent)


def test_business_override_changes_threshold(pipeline):
    # affinity 0.60, boosted to 0.69 for business queries whose threshold drops to 0.65
    item = {"title": "Funding", "content": "investment invest funding investor growth"}
    detected = pipeline.categorize([item], "bread recipe", {"now": NOW})
    forced = pipeline.categorize([item], "bread recipe", {"now": NOW, "business_context": True})
    assert [r.id for r in detected] == ["general"]
    assert [r.id for r in forced] == ["investmentTrends"]
    assert pipeline.last_stats.labels == ["general"]


def test_include_all_results_option(pipeline, sample_items):
    results = pipeline.categorize(
        sample_items, "AI investment trends 2025", {"now": NOW, "include_all_results": True},
    )
    assert results[-1].id == "all"
    assert len(results[-1].content) == 2


def test_related_items_raise_accuracy(pipeline):
    item = {"title": "Chip sales", "content": "Chip sales reached 4.7 million units, the company reported."}
    related = [{"title": "Confirmed", "content": "Analysts confirm 4.7 million units.", "url": "https://a.com"}]
    alone = pipeline.categorize([item], "chip sales", {"now": NOW})
    backed = pipeline.categorize([item], "chip sales", {"now": NOW, "related_items": related})
    assert backed[0].content[0].metrics.accuracy >= alone[0].content[0].metrics.accuracy


def test_filter_presentable(pipeline, sample_items):
    results = pipeline.categorize(
        sample_items,
        "AI investment trends 2025",
        {"now": NOW},
    )
    presentable = filter_presentable(results, threshold=0)
    assert [r.id for r in presentable] == [r.id for r in results]
    assert filter_presentable(results, threshold=101) == []


def test_categorize_text_splits_sections(pipeline):
    text = (
        "## Investment outlook\n"
        "Venture capital funding and investment growth continue in 2025.\n\n"
        "## Baking\n"
        "Flour, yeast and water.\n"
    )
    sources = [{"url": "https://pitchbook.com/report", "title": "PitchBook"}]
    results = pipeline.categorize_text(text, "AI investment trends 2025", sources, {"now": NOW})
    urls = [item.url for r in results for item in r.content]
    assert sorted(urls) == [
        "https://pitchbook.com/report#section-1",
        "https://pitchbook.com/report#section-2",
    ]


def test_registry_errors_surface_at_construction(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("[]")
    with pytest.raises(ValueError):
        Pipeline(Config(registry_path=str(path)))


def test_module_level_categorize(sample_items):
    registry = CategoryRegistry([
        Category(id="bread", name="Bread", primary_keywords=("bread",), secondary_keywords=("flour",)),
    ])
    results = Pipeline(registry=registry).categorize(sample_items, "bread", {"now": NOW})
    assert [r.id for r in results] == ["bread"]
    assert categorize(sample_items, "AI investment trends 2025", {"now": NOW})[0].id == "investmentTrends"


@pytest.mark.parametrize(
    "extra",
    [
        {"date": "0000"},
        {"date": "2025-13-45"},
        {"date": 1e30},
        {"date": ["2024"]},
        {"_metrics": {"relevance": math.inf}},
        {"_metrics": {"accuracy": -math.inf, "credibility": math.nan}},
        {"_metrics": {"relevance": 10**400}},
        {"_metrics": "high"},
        {"author_details": "Jane Doe"},
        {"author_details": {"publication_count": -3}},
        {"url": "http://[broken"},
        {"references": [{"url": None}, 7], "key_phrases": "funding"},
    ],
)
def test_malformed_fields_never_raise(pipeline, extra):
    item = {"title": "VC funding surges", "content": "investment growth", **extra}
    results = pipeline.categorize([item], "AI investment trends 2025", {"now": NOW})
    placed = [entry for r in results for entry in r.content]
    assert len(placed) == 1
    metrics = placed[0].metrics
    assert metrics.accuracy >= 70
    assert all(0 <= v <= 100 for v in metrics.display_dict().values())


def test_attached_metrics_keep_accuracy_floor(pipeline):
    item = {"title": "VC funding surges", "_metrics": {"accuracy": 10, "relevance": 90, "credibility": 90}}
    results = pipeline.categorize([item], "AI investment trends 2025", {"now": NOW})
    assert results[0].content[0].metrics.accuracy == 70


def test_non_list_related_items_are_ignored(pipeline, sample_items):
    results = pipeline.categorize(
        sample_items, "AI investment trends 2025", {"now": NOW, "related_items": 5},
    )
    assert sum(len(r.content) for r in results) == 2


def test_categorize_text_keeps_every_section(pipeline):
    text = "\n\n".join(f"## Topic {i}\nVenture funding note number {i}." for i in range(1, 5))
    sources = [{"url": "https://pitchbook.com/report"}]
    results = pipeline.categorize_text(text, "AI investment trends 2025", sources, {"now": NOW})
    assert sum(len(r.content) for r in results) == 4
