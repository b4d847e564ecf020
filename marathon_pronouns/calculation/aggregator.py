from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from loguru import logger

from marathon_pronouns.models.aggregate import AggregateView
from marathon_pronouns.models.enums import (
    NORMALIZED_EXCLUDED,
    SCHEDULE_CATEGORIES,
    SUBMISSION_CATEGORIES,
    Category,
)
from marathon_pronouns.models.runner import ClassifiedRunner


def bucket_identifiers(
    entries: Iterable[Tuple[str, Category]], categories: Sequence[Category]
) -> Dict[Category, List[str]]:
    """Groups identifiers by category, keeping each identifier once per bucket."""
    buckets: Dict[Category, List[str]] = {category: [] for category in categories}
    seen: Dict[Category, Set[str]] = {category: set() for category in categories}
    for identifier, category in entries:
        if identifier in seen[category]:
            continue
        seen[category].add(identifier)
        buckets[category].append(identifier)
    return buckets


def counts_to_percentages(
    counts: Mapping[Category, int]
) -> Dict[Category, Optional[float]]:
    """Share of every category over the grand total; undefined (None) when empty."""
    total = sum(counts.values())
    return {
        category: (value / total if total else None)
        for category, value in counts.items()
    }


def counts_to_normalized_percentages(
    counts: Mapping[Category, int]
) -> Dict[Category, Optional[float]]:
    """Shares over the total without unresolved and erroring runners.

    `none` has no normalized meaning and is left out of the result; `error` is
    excluded from the denominator but still reported.
    """
    total = sum(
        value for category, value in counts.items() if category not in NORMALIZED_EXCLUDED
    )
    return {
        category: (value / total if total else None)
        for category, value in counts.items()
        if category != Category.NONE
    }


def build_view(counts: Mapping[Category, int]) -> AggregateView:
    return AggregateView(
        counts=dict(counts),
        percentages=counts_to_percentages(counts),
        normalized_percentages=counts_to_normalized_percentages(counts),
    )


def aggregate(classified_runners: Iterable[ClassifiedRunner]) -> AggregateView:
    """Submissions view over classified runners."""
    buckets = bucket_identifiers(
        ((runner.identifier, runner.category) for runner in classified_runners),
        SUBMISSION_CATEGORIES,
    )
    return build_view({category: len(ids) for category, ids in buckets.items()})


def aggregate_schedule(
    scheduled_identifiers: Sequence[str],
    classified_by_identifier: Mapping[str, ClassifiedRunner],
) -> AggregateView:
    """Schedule view; identifiers with no matching submission count as notFound."""
    entries = []
    for identifier in scheduled_identifiers:
        runner = classified_by_identifier.get(identifier)
        category = runner.category if runner is not None else Category.NOT_FOUND
        entries.append((identifier, category))

    buckets = bucket_identifiers(entries, SCHEDULE_CATEGORIES)
    if buckets[Category.NOT_FOUND]:
        logger.debug(
            f"{len(buckets[Category.NOT_FOUND])} scheduled runner(s) without a submission"
        )
    return build_view({category: len(ids) for category, ids in buckets.items()})
