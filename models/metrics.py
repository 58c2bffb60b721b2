"""Metric models for scored search results.

This module defines the per-item MetricBundle produced by the scoring
calculators, the WeightProfile that turns the three quality metrics into an
overall score, and the DEFAULT_METRICS bundle substituted when a calculator
fails.

Score Scale:
    Every metric is an integer in [0, 100]. Values are clamped on the way in,
    so boosts and pre-attached bundles can never push a field out of range.

    overall = round(relevance * w.relevance
                    + accuracy * w.accuracy
                    + credibility * w.credibility)

    Rounding is half-up so the same inputs always produce the same integers.
"""

import math
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

METRIC_FIELDS = ("relevance", "accuracy", "credibility", "recency")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round a raw score and clamp it into [0, 100]."""
    return max(0, min(100, round_half_up(value)))


class WeightProfile(BaseModel):
    """Weights combining relevance, accuracy and credibility into overall.

    Attributes:
        relevance: Weight of the relevance metric
        accuracy: Weight of the accuracy metric
        credibility: Weight of the credibility metric
    """

    model_config = ConfigDict(frozen=True)

    relevance: float = Field(ge=0.0, le=1.0, description="Relevance weight")
    accuracy: float = Field(ge=0.0, le=1.0, description="Accuracy weight")
    credibility: float = Field(ge=0.0, le=1.0, description="Credibility weight")

    @model_validator(mode="after")
    def _check_total(self) -> "WeightProfile":
        total = self.relevance + self.accuracy + self.credibility
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"Weights must sum to 1.0, got {total:.3f}")
        return self

    def overall(self, relevance: float, accuracy: float, credibility: float) -> int:
        """Combine the three quality metrics into the overall score."""
        return clamp_score(
            relevance * self.relevance
            + accuracy * self.accuracy
            + credibility * self.credibility
        )


class MetricBundle(BaseModel):
    """Scores for one item (or the aggregate of a category).

    Attributes:
        relevance: How well the item answers the query
        accuracy: Verifiability of the item's claims (floored at 70)
        credibility: Trustworthiness of source and author
        recency: Freshness of the item
        overall: Weighted combination of relevance, accuracy and credibility

    Example:
        >>> bundle = MetricBundle.from_scores(80, 75, 70, 90, weights)
        >>> bundle.passes_display_threshold()
        True
    """

    model_config = ConfigDict(frozen=True)

    relevance: int = Field(ge=0, le=100, description="Relevance score")
    accuracy: int = Field(ge=0, le=100, description="Accuracy score")
    credibility: int = Field(ge=0, le=100, description="Credibility score")
    recency: int = Field(ge=0, le=100, description="Recency score")
    overall: int = Field(ge=0, le=100, description="Weighted overall score")

    @classmethod
    def from_scores(
        cls,
        relevance: float,
        accuracy: float,
        credibility: float,
        recency: float,
        weights: WeightProfile,
    ) -> "MetricBundle":
        """Build a bundle from raw scores, deriving overall from the weights."""
        relevance = clamp_score(relevance)
        accuracy = clamp_score(accuracy)
        credibility = clamp_score(credibility)
        return cls(
            relevance=relevance,
            accuracy=accuracy,
            credibility=credibility,
            recency=clamp_score(recency),
            overall=weights.overall(relevance, accuracy, credibility),
        )

    @classmethod
    def coerce(cls, raw: Mapping[str, Any], weights: WeightProfile) -> "MetricBundle":
        """Normalize a bundle attached by an upstream producer.

        Values are clamped into range and non-finite values are ignored. A
        bundle whose numeric values are all fractions (<= 1.0, with at least
        one float) is treated as 0-1 scaled.
        Missing fields come from DEFAULT_METRICS, and overall is recomputed
        when absent.

        Args:
            raw: Mapping with any subset of the metric fields
            weights: Active weight profile for deriving overall

        Returns:
            A valid MetricBundle
        """
        values: dict[str, float] = {}
        for name in METRIC_FIELDS + ("overall",):
            value = raw.get(name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            try:
                number = float(value)
            except OverflowError:
                continue
            if not math.isfinite(number):
                continue
            values[name] = number

        fractional = bool(values) and all(v <= 1.0 for v in values.values()) and any(
            isinstance(raw.get(name), float) for name in values
        )
        if fractional:
            values = {name: v * 100 for name, v in values.items()}

        merged = {
            name: values.get(name, getattr(DEFAULT_METRICS, name))
            for name in METRIC_FIELDS
        }
        bundle = cls.from_scores(
            merged["relevance"],
            merged["accuracy"],
            merged["credibility"],
            merged["recency"],
            weights,
        )
        if "overall" in values:
            bundle = bundle.model_copy(update={"overall": clamp_score(values["overall"])})
        return bundle

    @classmethod
    def default(cls, weights: WeightProfile) -> "MetricBundle":
        """DEFAULT_METRICS with overall derived from the given weights."""
        return cls.from_scores(
            DEFAULT_METRICS.relevance,
            DEFAULT_METRICS.accuracy,
            DEFAULT_METRICS.credibility,
            DEFAULT_METRICS.recency,
            weights,
        )

    def with_accuracy_floor(self, floor: int, weights: WeightProfile) -> "MetricBundle":
        """Raise accuracy to the floor, re-deriving overall when it moves."""
        if self.accuracy >= floor:
            return self
        return MetricBundle.from_scores(
            self.relevance, floor, self.credibility, self.recency, weights,
        )

    def passes_display_threshold(self, threshold: int = 70) -> bool:
        """Check whether the quality metrics are all presentable."""
        return min(self.relevance, self.accuracy, self.credibility, self.overall) >= threshold

    def display_dict(self) -> dict[str, int]:
        """Metrics exposed to display code."""
        return {
            "relevance": self.relevance,
            "accuracy": self.accuracy,
            "credibility": self.credibility,
            "overall": self.overall,
        }

    def __str__(self) -> str:
        """Compact representation for logging."""
        return (
            f"Metrics(rel={self.relevance} acc={self.accuracy} "
            f"cred={self.credibility} rec={self.recency} overall={self.overall})"
        )


# Substituted when a calculator fails; overall here uses the general profile.
DEFAULT_METRICS = MetricBundle(
    relevance=75,
    accuracy=80,
    credibility=70,
    recency=65,
    overall=75,
)
