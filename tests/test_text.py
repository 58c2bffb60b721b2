from scoring.text import (
    contains_term,
    count_hits,
    has_decimals,
    normalize,
    numeric_tokens,
    query_terms,
    term_in_text,
)


def test_normalize_folds_case_whitespace_and_caps_length():
    assert normalize("  Hello\n\tWORLD  ") == "hello world"
    assert normalize("abcdef", max_length=3) == "abc"
    assert normalize(None) == ""


def test_contains_term_word_boundaries_for_short_terms():
    assert not contains_term("she said so", "ai")
    assert contains_term("ai startups raise money", "ai")
    assert contains_term("investments are up", "invest")


def test_count_hits_counts_distinct_terms():
    assert count_hits("growth and more growth", ["growth", "growth", "funding"]) == 1


def test_query_terms_drop_stopwords():
    assert query_terms("What is the AI market") == ["ai", "market"]
    assert query_terms("the") == ["the"]


def test_term_in_text_plural_fallback():
    assert term_in_text("a new trend emerges", "trends")
    assert not term_in_text("a new trend emerges", "news")


def test_numeric_helpers():
    assert has_decimals("up 4.5 points")
    assert not has_decimals("up 45 points")
    assert numeric_tokens("revenue rose 12% in 2024 to 3.4") == {"12%", "3.4"}
