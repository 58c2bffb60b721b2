import json
import logging

import pytest

from config import CONTEXT_WEIGHTS, Config, weights_for
from observability.logging import ContextFilter, JsonFormatter, clear_context, set_run_context


def test_defaults_are_valid():
    config = Config()
    assert config.validate() is None
    assert (config.first_pass_threshold, config.second_pass_threshold) == (0.70, 0.65)
    assert config.max_categories == 6


def test_load_reads_environment(monkeypatch):
    monkeypatch.setenv("FIRST_PASS_THRESHOLD", "0.8")
    monkeypatch.setenv("MAX_CATEGORIES", "4")
    monkeypatch.setenv("INCLUDE_ALL_RESULTS", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    config = Config.load()
    assert config.first_pass_threshold == 0.8
    assert config.max_categories == 4
    assert config.include_all_results is True
    assert config.log_level == "DEBUG"


def test_load_rejects_unparseable_numbers(monkeypatch):
    monkeypatch.setenv("MAX_CATEGORIES", "six")
    with pytest.raises(ValueError, match="MAX_CATEGORIES"):
        Config.load()


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"second_pass_threshold": 0.9}, "SECOND_PASS_THRESHOLD"),
        ({"first_pass_threshold": 1.5}, "FIRST_PASS_THRESHOLD"),
        ({"business_boost": 0.9}, "BUSINESS_BOOST"),
        ({"max_categories": 0}, "MAX_CATEGORIES"),
        ({"registry_path": "/nonexistent/categories.json"}, "REGISTRY_PATH"),
        ({"log_format": "xml"}, "LOG_FORMAT"),
    ],
)
def test_validate_reports_bad_values(overrides, fragment):
    assert fragment in Config(**overrides).validate()


def test_adaptive_threshold():
    config = Config()
    assert config.adaptive_threshold(0.70, verified=True, business=True) == 0.1
    assert config.adaptive_threshold(0.70, verified=False, business=True) == pytest.approx(0.65)
    assert config.adaptive_threshold(0.30, verified=False, business=True) == 0.3
    assert config.adaptive_threshold(0.70, verified=False, business=False) == 0.70


def test_weight_profiles():
    assert weights_for("financial").accuracy == 0.45
    assert weights_for("unknown") == CONTEXT_WEIGHTS["general"]
    assert weights_for("business") == weights_for("general")


def test_json_log_records_carry_run_context():
    record = logging.LogRecord("pipeline", logging.INFO, __file__, 1, "Run %s", ("ok",), None)
    record.items = 3
    set_run_context("abc12345", "ai investment trends")
    try:
        ContextFilter().filter(record)
    finally:
        clear_context()
    data = json.loads(JsonFormatter().format(record))
    assert data["message"] == "Run ok"
    assert data["run_id"] == "abc12345"
    assert data["query"] == "ai investment trends"
    assert data["items"] == 3
