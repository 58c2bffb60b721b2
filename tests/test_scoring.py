from datetime import timedelta

import pytest

from models.content import ContentItem
from scoring import accuracy, credibility, recency, relevance
from scoring.context import build_context
from tests.conftest import AI_ITEM, BREAD_ITEM, NOW


def _item(**fields):
    return ContentItem.from_raw(fields)


# Relevance


def test_relevance_of_matching_item_clears_display_threshold():
    context = build_context("AI investment trends 2025")
    assert relevance.score(_item(**AI_ITEM), context, NOW) == 76


def test_relevance_of_unrelated_item_is_low():
    context = build_context("AI investment trends 2025")
    assert relevance.score(_item(**BREAD_ITEM), context, NOW) == 22


def test_exact_phrase_bonus():
    context = build_context("solar panel subsidies")
    plain = _item(title="Subsidies", content="panel makers and solar farms")
    exact = _item(title="Subsidies", content="new solar panel subsidies announced")
    assert relevance.score(exact, context, NOW) > relevance.score(plain, context, NOW)


@pytest.mark.parametrize(
    "days, expected",
    [(0, 1.0), (7, 1.0), (30, 0.9), (90, 0.8), (2000, 0.2)],
)
def test_age_decay_curve(days, expected):
    assert relevance.age_decay(NOW - timedelta(days=days), NOW) == pytest.approx(expected)


def test_age_decay_neutral_without_date_and_fresh_in_future():
    assert relevance.age_decay(None, NOW) == relevance.NEUTRAL_AGE
    assert relevance.age_decay(NOW + timedelta(days=3), NOW) == 1.0


# Accuracy


def test_accuracy_never_reported_below_floor():
    weak = _item(title="hot take", content="trust me", url="https://reddit.com/r/x")
    assert accuracy.score(weak, NOW) == 70
    assert accuracy.score(weak, NOW, floor=0) < 70


def test_accuracy_rewards_verifiable_reporting():
    strong = _item(
        title="Inflation report",
        content=(
            "According to the Bureau of Labor Statistics, inflation was 3.2% in May 2025. "
            "The survey data has a margin of error of 0.1 points."
        ),
        url="https://www.bls.gov/news/cpi",
        date="2025-05-20",
        data_source="BLS CPI release",
    )
    assert accuracy.score(strong, NOW, floor=0) > 75


def test_fact_check_verdicts_shift_consistency():
    text = "claims about the economy"
    true_item = _item(title="Claim", content=text, fact_check_status="Mostly True")
    false_item = _item(title="Claim", content=text, fact_check_status="false")
    assert accuracy.factual_consistency(true_item, text) > accuracy.factual_consistency(false_item, text)


def test_cross_reference_with_related_items():
    item = _item(title="Sales", content="Sales reached 4.7 million units, the company reported.")
    agreeing = _item(title="Sales", content="Analysts confirm 4.7 million units sold.", url="https://a.com/1")
    unrelated = _item(title="Other", content="Nothing numeric here.", url="https://b.com/2")
    text = item.extract_text().lower()
    assert accuracy.cross_reference(item, text, [agreeing]) > accuracy.cross_reference(item, text, [unrelated])


# Credibility


def test_credibility_prefers_institutional_experts():
    expert = _item(
        title="Study on monetary policy",
        content="Peer-reviewed analysis. Methodology and limitations are disclosed.",
        url="https://economics.mit.edu/paper",
        author={"name": "Jane Roe", "credentials": ["PhD"], "affiliation": "MIT", "verified": True},
        references=[{"url": "https://www.federalreserve.gov/data", "peer_reviewed": True}],
    )
    anonymous = _item(title="my thoughts", content="rates will go up", url="https://someblog.blogspot.com/p")
    assert credibility.score(expert) > credibility.score(anonymous) + 25


def test_credibility_defaults_without_source_or_author():
    bare = _item(title="t", content="c")
    assert credibility.source_reputation(bare) == credibility.NO_SOURCE_REPUTATION
    assert credibility.author_expertise(bare) == credibility.NO_AUTHOR_EXPERTISE


def test_preprint_peer_review_signal():
    preprint = _item(title="Working paper", content="This preprint is not yet peer reviewed.")
    assert credibility._peer_review(preprint, preprint.extract_text().lower()) == 0.6


# Recency


def test_recency_neutral_without_date():
    assert recency.score(_item(title="t", content="c"), NOW) == recency.NEUTRAL_RECENCY


@pytest.mark.parametrize(
    "days, expected",
    [(0, 100), (20, 100), (90, 90), (180, 80), (360, 70), (4000, 30)],
)
def test_recency_curve(days, expected):
    item = _item(title="t", content="c", date=(NOW - timedelta(days=days)).isoformat())
    assert recency.score(item, NOW) == expected


def test_recency_future_dates_count_as_new():
    item = _item(title="t", content="c", date=(NOW + timedelta(days=10)).isoformat())
    assert recency.score(item, NOW) == 100
