import pytest

from categories.categorizer import CategorizationRun, CategorizerState, DynamicCategorizer, StateError
from categories.registry import CategoryRegistry
from config import Config
from models.category import Category
from models.content import ContentItem
from scoring.context import build_context
from tests.conftest import AI_ITEM, BREAD_ITEM, NOW, word_category


def _items(*raws):
    return [ContentItem.from_raw(r) for r in raws]


def _run(categorizer, items, query="alpha", **kwargs):
    context = build_context(query, business_override=False)
    scored = [categorizer.score_item(i, item, context, NOW) for i, item in enumerate(items)]
    return categorizer.new_run(scored, context, **kwargs)


def test_steps_must_run_in_order(word_registry, config):
    run = _run(DynamicCategorizer(word_registry, config), _items({"title": "alpha"}))
    with pytest.raises(StateError):
        run.second_pass()
    run.first_pass()
    with pytest.raises(StateError):
        run.first_pass()
    with pytest.raises(StateError):
        run.cap()


def test_run_reaches_sorted(word_registry, config):
    run = _run(DynamicCategorizer(word_registry, config), _items({"title": "alpha"}))
    results = run.run()
    assert run.state is CategorizerState.SORTED
    assert [r.id for r in results] == ["alpha"]
    assert results[0].content[0].category_score == 85


def test_each_item_lands_in_exactly_one_category(word_registry, config):
    categorizer = DynamicCategorizer(word_registry, config)
    items = _items(
        {"title": "alpha bravo", "url": "https://x.com/1"},
        {"title": "bravo", "url": "https://x.com/2"},
    )
    results = categorizer.categorize(items, build_context("alpha"), NOW)
    placed = [item.url for r in results for item in r.content]
    assert sorted(placed) == ["https://x.com/1", "https://x.com/2"]
    # equal affinity keeps the earlier candidate (catalog order)
    assert [r.id for r in results] == ["alpha", "bravo"]


def test_duplicate_urls_keep_higher_scoring_instance(word_registry, config):
    categorizer = DynamicCategorizer(word_registry, config)
    items = _items(
        {"title": "weak", "content": "nothing here", "url": "https://same.com/a"},
        {"title": "alpha", "content": "alpha", "url": "https://same.com/a/"},
    )
    run = _run(categorizer, items)
    results = run.run()
    assert [r.id for r in results] == ["alpha"]
    assert [i.title for i in results[0].content] == ["alpha"]
    assert run.fallback_assigned == 0


def test_second_pass_uses_relaxed_threshold(config):
    # a lone primary hit scores 0.60
    relaxed = Config(first_pass_threshold=0.70, second_pass_threshold=0.55)
    registry = CategoryRegistry([
        Category(id="solo", name="Solo", primary_keywords=("alpha",)),
        Category(id="general", name="General Results", priority=5, fallback=True),
    ])
    run = _run(DynamicCategorizer(registry, relaxed), _items({"title": "alpha"}))
    results = run.run()
    assert [r.id for r in results] == ["solo"]
    assert run.first_pass_assigned == 0
    assert run.second_pass_assigned == 1
    assert results[0].content[0].category_score == 60


def test_unmatched_items_go_to_fallback(word_registry, config):
    run = _run(DynamicCategorizer(word_registry, config), _items({"title": "zulu"}))
    results = run.run()
    assert [r.id for r in results] == ["general"]
    assert results[0].content[0].category_score == 60
    assert run.fallback_assigned == 1


def test_without_fallback_unmatched_items_are_unassigned(config):
    registry = CategoryRegistry([word_category("alpha")])
    run = _run(DynamicCategorizer(registry, config), _items({"title": "zulu"}))
    assert run.run() == []
    assert run.unassigned == 1


def test_category_cap_keeps_precedence_order(word_registry, config):
    words = ("alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel")
    items = _items(*({"title": w, "url": f"https://x.com/{w}"} for w in words))
    run = _run(DynamicCategorizer(word_registry, config), items)
    results = run.run()
    assert len(results) == 6
    assert [r.id for r in results] == list(words[:6])
    assert run.categories_dropped == 2


def test_cap_orders_by_priority_then_size(config):
    registry = CategoryRegistry([
        word_category("alpha", priority=2),
        word_category("bravo", priority=1),
        word_category("charlie", priority=2),
    ])
    items = _items(
        {"title": "alpha", "url": "https://x.com/1"},
        {"title": "bravo", "url": "https://x.com/2"},
        {"title": "charlie", "url": "https://x.com/3"},
        {"title": "charlie again", "url": "https://x.com/4"},
    )
    results = _run(DynamicCategorizer(registry, config), items).run()
    assert [r.id for r in results] == ["bravo", "charlie", "alpha"]


def test_items_sorted_by_relevance_with_stable_ties(word_registry, config):
    def item(n, rel):
        return {"title": "alpha", "url": f"https://x.com/{n}", "_metrics": {"relevance": rel}}

    items = _items(item(1, 80), item(2, 90), item(3, 80))
    results = _run(DynamicCategorizer(word_registry, config), items).run()
    assert [i.url for i in results[0].content] == [
        "https://x.com/2", "https://x.com/1", "https://x.com/3",
    ]
    assert results[0].metrics.relevance == 83


def test_catch_all_holds_every_unique_item(word_registry, config):
    items = _items(
        {"title": "alpha", "url": "https://x.com/1"},
        {"title": "zulu", "url": "https://x.com/2"},
        {"title": "alpha copy", "url": "https://x.com/1"},
    )
    results = _run(
        DynamicCategorizer(word_registry, config), items, include_all_results=True,
    ).run()
    assert [r.id for r in results] == ["alpha", "general", "all"]
    assert len(results[-1].content) == 2


def test_matcher_fault_sends_item_to_fallback(word_registry, config, monkeypatch, caplog):
    categorizer = DynamicCategorizer(word_registry, config)

    def broken(*args, **kwargs):
        raise RuntimeError("matcher down")

    monkeypatch.setattr(categorizer.matcher, "score", broken)
    context = build_context("alpha")
    entry = categorizer.score_item(0, ContentItem.from_raw({"title": "alpha"}), context, NOW)
    assert entry.affinities == []
    assert "Category matching failed" in caplog.text

    results = CategorizationRun(word_registry, config, context, [entry]).run()
    assert [r.id for r in results] == ["general"]


def test_investment_query_with_default_registry(registry, config):
    categorizer = DynamicCategorizer(registry, config)
    context = build_context("AI investment trends 2025")
    results = categorizer.categorize(_items(AI_ITEM, BREAD_ITEM), context, NOW)
    assert [r.id for r in results] == ["investmentTrends", "general"]
    ai = results[0].content[0]
    assert ai.metrics.relevance >= 70
    assert ai.category_score == 83
