from datetime import timedelta

import pytest

from categories.matcher import CategoryMatcher, apply_boost
from models.content import ContentItem
from scoring.context import build_context
from scoring.text import normalize
from tests.conftest import AI_ITEM, BREAD_ITEM, NOW


def test_base_score_two_tiers(registry, config):
    matcher = CategoryMatcher(registry, config)
    category = registry.get("investmentTrends")
    text = normalize(ContentItem.from_raw(AI_ITEM).extract_text())
    query = normalize("AI investment trends 2025")
    # primary saturated (0.60) + 1/8 secondary + 6/10 query terms
    assert matcher.base_score(text, query, category) == pytest.approx(0.60 + 0.25 / 8 + 0.09)


def test_business_query_boosts_business_categories(registry, config):
    matcher = CategoryMatcher(registry, config)
    item = ContentItem.from_raw(AI_ITEM)
    category = registry.get("investmentTrends")
    business = build_context("AI investment trends 2025")
    neutral = build_context("AI investment trends 2025", business_override=False)
    assert matcher.score(item, category, business) == pytest.approx(
        matcher.score(item, category, neutral) * 1.15
    )


def test_special_categories_never_match(registry, config):
    matcher = CategoryMatcher(registry, config)
    item = ContentItem.from_raw(AI_ITEM)
    context = build_context("AI investment trends 2025")
    assert matcher.score(item, registry.fallback, context) == 0.0
    assert matcher.score(item, registry.catch_all, context) == 0.0


def test_apply_boost_respects_cap():
    assert apply_boost(0.5, 1.2) == pytest.approx(0.6)
    assert apply_boost(0.9, 1.2) == 0.95
    score = 0.9
    for _ in range(10):
        score = apply_boost(score, 1.2)
    assert score == 0.95


def test_stacked_boosts_never_exceed_cap(word_registry, config):
    matcher = CategoryMatcher(word_registry, config)
    item = ContentItem.from_raw({
        "title": "alpha",
        "verified": True,
        "date": (NOW - timedelta(days=1)).isoformat(),
    })
    context = build_context("alpha", business_override=True)
    category = word_registry.get("alpha").model_copy(update={"business": True})
    assert matcher.score(item, category, context, now=NOW) == 0.95


def test_adaptive_thresholds(registry, config):
    matcher = CategoryMatcher(registry, config)
    plain = ContentItem.from_raw({"title": "t"})
    verified = ContentItem.from_raw({"title": "t", "verified": True})
    business = build_context("AI investment trends 2025")
    general = build_context("bread recipe")
    assert matcher.threshold(verified, general) == 0.1
    assert matcher.threshold(plain, general) == 0.5
    assert matcher.threshold(plain, business, base=0.70) == pytest.approx(0.65)
    assert matcher.threshold(plain, business, base=0.32) == 0.3


def test_best_match(registry, config):
    matcher = CategoryMatcher(registry, config)
    context = build_context("AI investment trends 2025")
    category, score = matcher.best_match(ContentItem.from_raw(AI_ITEM), context, threshold=0.70)
    assert category.id == "investmentTrends"
    assert score == pytest.approx((0.60 + 0.25 / 8 + 0.09) * 1.15)
    assert matcher.best_match(ContentItem.from_raw(BREAD_ITEM), context) is None
