from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import Category


class AggregateView(BaseModel):
    """Counts and percentage breakdowns for one roster view.

    Percentage values are ``None`` when their denominator is zero; that is the
    explicit "undefined" state and serializes to JSON ``null``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    counts: Dict[Category, int]
    percentages: Dict[Category, Optional[float]]
    normalized_percentages: Dict[Category, Optional[float]] = Field(
        alias="normalizedPercentages"
    )

    @property
    def total(self) -> int:
        return sum(self.counts.values())


class AggregationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    submissions: AggregateView
    schedule: Optional[AggregateView] = None

    def to_json(self) -> Dict[str, Any]:
        """JSON-serializable form with category values as keys."""
        return self.model_dump(mode="json", by_alias=True)


class CombinedAggregation(BaseModel):
    """Counts summed over many events, with percentages recomputed from the sums."""

    model_config = ConfigDict(frozen=True)

    events: List[str]
    submissions: AggregateView
    schedule: AggregateView

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
