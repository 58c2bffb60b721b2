"""Query context model.

A QueryContext is the classified form of a search query: the ordered
context labels (most matched first), the hit count behind each label, the
weight profile selected by the first label, and whether the query reads as
a business question.
"""

from pydantic import BaseModel, ConfigDict, Field

from models.metrics import WeightProfile

GENERAL = "general"


class QueryContext(BaseModel):
    """Classified query.

    Attributes:
        query: The original query string
        labels: Context labels, most matched first (["general"] when none hit)
        counts: Keyword hits per matched label
        weights: Weight profile selected by the first label
        is_business: Query reads as a business question
    """

    model_config = ConfigDict(frozen=True)

    query: str = Field(default="", description="Original query")
    labels: tuple[str, ...] = Field(default=(GENERAL,), description="Ordered context labels")
    counts: dict[str, int] = Field(default_factory=dict, description="Hits per label")
    weights: WeightProfile = Field(description="Active weight profile")
    is_business: bool = Field(default=False, description="Business query")

    @property
    def primary(self) -> str:
        """The label that selected the weight profile."""
        return self.labels[0] if self.labels else GENERAL

    def has(self, label: str) -> bool:
        return label in self.labels

    def __str__(self) -> str:
        labels = ",".join(self.labels)
        return f"QueryContext('{self.query[:40]}', labels={labels}, business={self.is_business})"
