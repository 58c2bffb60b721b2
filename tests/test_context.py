from config import CONTEXT_WEIGHTS
from scoring.context import build_context, classify, is_business_query


def test_classify_orders_by_hits_with_declaration_tiebreak():
    assert classify("latest stock market news") == ["financial", "news"]


def test_classify_unmatched_query_is_general():
    assert classify("bread recipe") == ["general"]
    assert classify("") == ["general"]


def test_short_keywords_match_whole_words_only():
    # "ai" must not be found inside "said" or "paint"
    assert "technical" not in classify("she said paint")
    assert "technical" in classify("ai tools")


def test_weights_follow_first_label():
    context = build_context("breaking news today")
    assert context.labels == ("news",)
    assert context.weights == CONTEXT_WEIGHTS["news"]


def test_business_detected_from_labels_and_patterns():
    assert build_context("AI investment trends 2025").is_business
    assert is_business_query("Acme Inc quarterly update")
    assert is_business_query("EV market 2025")
    assert not is_business_query("bread recipe")


def test_business_override_wins():
    assert not build_context("AI investment trends 2025", business_override=False).is_business
    assert build_context("bread recipe", business_override=True).is_business


def test_non_string_query_is_general():
    context = build_context(None)
    assert context.primary == "general"
    assert not context.is_business
