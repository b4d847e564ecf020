import asyncio
from typing import Any, Dict, Iterable, List, Optional

import httpx
from loguru import logger

from marathon_pronouns.calculation.aggregator import build_view
from marathon_pronouns.config.settings import settings
from marathon_pronouns.models.aggregate import CombinedAggregation
from marathon_pronouns.models.enums import SUBMISSION_CATEGORIES, Source
from marathon_pronouns.resolution.cache import TTLCache
from marathon_pronouns.scrapers.oengus_scraper import OengusScraper
from .orchestrator import build_http_client, calculate_for_source


def combine_results(results: Iterable[Dict[str, Any]]) -> CombinedAggregation:
    """Sums per-event counts and recomputes percentages over the sums.

    Only the submission categories are combined; a missing schedule counts as
    zero for every category.
    """
    names: List[str] = []
    submissions = {category: 0 for category in SUBMISSION_CATEGORIES}
    schedule = {category: 0 for category in SUBMISSION_CATEGORIES}

    for result in results:
        names.append(result["name"])
        submission_counts = result["submissions"]["counts"]
        schedule_counts = (result.get("schedule") or {}).get("counts", {})
        for category in SUBMISSION_CATEGORIES:
            submissions[category] += submission_counts.get(category.value, 0)
            schedule[category] += schedule_counts.get(category.value, 0)

    return CombinedAggregation(
        events=names,
        submissions=build_view(submissions),
        schedule=build_view(schedule),
    )


async def aggregate_marathons(
    start: str,
    end: str,
    zone_id: str = "UTC",
    language: Optional[str] = "en",
    client: Optional[httpx.AsyncClient] = None,
    cache: Optional[TTLCache] = None,
    max_concurrency: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> CombinedAggregation:
    """Aggregates every Oengus marathon in a date window and combines the counts.

    Marathons that fail to fetch or normalize are logged and left out.
    """
    owns_client = client is None
    client = client or build_http_client()
    semaphore = asyncio.Semaphore(max_concurrency or settings.batch_max_concurrency)

    async def run_one(slug: str) -> Optional[Dict[str, Any]]:
        async with semaphore:
            logger.info(f"Fetching and normalizing marathon with slug {slug}.")
            result = await calculate_for_source(
                Source.OENGUS, slug, client=client, cache=cache, max_attempts=max_attempts
            )
        if "error" in result:
            logger.error(f"Error fetching {slug}: {result['error']}")
            return None
        return result

    try:
        marathons = await OengusScraper(
            client=client, max_attempts=max_attempts
        ).list_marathons(start, end, zone_id)
        relevant = [
            marathon
            for marathon in marathons
            if language is None or marathon.get("language") == language
        ]
        logger.info(
            f"Found {len(relevant)} relevant events ({len(marathons)} total)."
        )

        results = await asyncio.gather(*(run_one(marathon["id"]) for marathon in relevant))
    finally:
        if owns_client:
            await client.aclose()

    logger.info("All aggregations fetched and calculated, combining...")
    return combine_results(result for result in results if result is not None)
