from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from config import CONTEXT_WEIGHTS
from models import ContentItem, MetricBundle, WeightProfile
from models.category import aggregate_metrics
from models.content import normalize_url, parse_date

GENERAL = CONTEXT_WEIGHTS["general"]


def test_from_raw_rejects_structurally_invalid_results():
    assert ContentItem.from_raw(None) is None
    assert ContentItem.from_raw("just a string") is None
    assert ContentItem.from_raw({"url": "https://example.com"}) is None
    assert ContentItem.from_raw({"title": "   ", "content": ""}) is None


def test_from_raw_resolves_field_spellings():
    item = ContentItem.from_raw({
        "name": "Fed holds rates",
        "snippet": "The Federal Reserve left rates unchanged.",
        "link": "https://www.reuters.com/markets/fed",
        "publishedDate": "2025-05-01T12:00:00Z",
        "sourceType": "Government",
    })
    assert item.title == "Fed holds rates"
    assert item.content.startswith("The Federal Reserve")
    assert item.domain == "reuters.com"
    assert item.date == datetime(2025, 5, 1, 12, tzinfo=timezone.utc)
    assert item.source_type == "government"


def test_malformed_optional_fields_do_not_drop_item():
    item = ContentItem.from_raw({
        "title": "Still usable",
        "author_details": {"publication_count": "many"},
    })
    assert item is not None
    assert item.author_details is None


def test_identity_uses_normalized_url_first():
    a = ContentItem.from_raw({"title": "A", "url": "https://Example.com/story/"})
    b = ContentItem.from_raw({"title": "B", "url": "https://example.com/story"})
    c = ContentItem.from_raw({"title": "A", "content": "same"})
    d = ContentItem.from_raw({"title": "a!", "content": "Same"})
    assert a.identity == b.identity
    assert len(a.identity) == 16
    assert c.identity == d.identity


def test_normalize_url_keeps_query_and_fragment():
    assert normalize_url("HTTPS://Site.com/a/?q=1#x") == "https://site.com/a?q=1#x"


def test_section_fragments_keep_distinct_identities():
    a = ContentItem.from_raw({"title": "A", "url": "https://example.com/report#section-1"})
    b = ContentItem.from_raw({"title": "A", "url": "https://example.com/report#section-2"})
    assert a.identity != b.identity


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ("March 5, 2024", datetime(2024, 3, 5, tzinfo=timezone.utc)),
        (1717200000000, datetime(2024, 6, 1, tzinfo=timezone.utc)),
        (1717200000, datetime(2024, 6, 1, tzinfo=timezone.utc)),
        ("not a date", None),
        ("0000", None),
    ],
)
def test_parse_date_shapes(value, expected):
    assert parse_date(value) == expected


def test_attached_metrics_kept_for_calculator():
    item = ContentItem.from_raw({"title": "t", "_metrics": {"relevance": 90}})
    assert item.attached_metrics == {"relevance": 90}
    assert item.metrics is None


def test_to_dict_uses_wire_names():
    bundle = MetricBundle.from_scores(80, 80, 80, 80, GENERAL)
    item = ContentItem.from_raw({"title": "t"}).model_copy(
        update={"metrics": bundle, "category_score": 83}
    )
    data = item.to_dict()
    assert data["_metrics"]["overall"] == 80
    assert data["_categoryScore"] == 83
    assert "attached_metrics" not in data


def test_weight_profile_must_sum_to_one():
    with pytest.raises(ValidationError):
        WeightProfile(relevance=0.5, accuracy=0.5, credibility=0.5)


def test_from_scores_clamps_and_derives_overall():
    bundle = MetricBundle.from_scores(150, -3, 70, 55.5, GENERAL)
    assert (bundle.relevance, bundle.accuracy, bundle.recency) == (100, 0, 56)
    assert bundle.overall == 56  # 35 + 0 + 21


def test_coerce_rescales_fractional_bundles():
    bundle = MetricBundle.coerce({"relevance": 0.8, "accuracy": 0.9, "credibility": 0.7}, GENERAL)
    assert (bundle.relevance, bundle.accuracy, bundle.credibility) == (80, 90, 70)
    assert bundle.recency == 65


def test_coerce_keeps_integer_bundles_and_explicit_overall():
    bundle = MetricBundle.coerce({"relevance": 1, "overall": 140}, GENERAL)
    assert bundle.relevance == 1
    assert bundle.overall == 100


def test_display_threshold():
    assert MetricBundle.from_scores(80, 75, 70, 0, GENERAL).passes_display_threshold()
    assert not MetricBundle.from_scores(80, 75, 69, 100, GENERAL).passes_display_threshold()


def test_aggregate_metrics_rounds_half_up():
    items = [
        ContentItem.from_raw({"title": "a"}).model_copy(
            update={"metrics": MetricBundle.from_scores(70, 70, 70, 70, GENERAL)}
        ),
        ContentItem.from_raw({"title": "b"}).model_copy(
            update={"metrics": MetricBundle.from_scores(71, 70, 70, 70, GENERAL)}
        ),
    ]
    assert aggregate_metrics(items).relevance == 71
    assert aggregate_metrics([]).overall == 0
