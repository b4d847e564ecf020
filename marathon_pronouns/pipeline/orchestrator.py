import asyncio
from typing import Any, Dict, List, Optional, Type

import httpx
from loguru import logger

from marathon_pronouns.calculation.aggregator import aggregate, aggregate_schedule
from marathon_pronouns.classification.classifier import classify_runner
from marathon_pronouns.config.settings import settings
from marathon_pronouns.models.aggregate import AggregationResult
from marathon_pronouns.models.enums import Source
from marathon_pronouns.models.event import NormalizedEvent
from marathon_pronouns.models.runner import ResolvedRunner
from marathon_pronouns.normalization.normalizer import NormalizationError, Normalizer
from marathon_pronouns.resolution.cache import TTLCache
from marathon_pronouns.resolution.resolver import PronounResolver
from marathon_pronouns.scrapers.base_scraper import EventScraper, ScraperError
from marathon_pronouns.scrapers.horaro_scraper import HoraroScraper
from marathon_pronouns.scrapers.lookup_clients import (
    AlejoPronounsClient,
    SpeedrunComClient,
)
from marathon_pronouns.scrapers.oengus_scraper import OengusScraper

EVENT_SCRAPERS: Dict[Source, Type[EventScraper]] = {
    Source.OENGUS: OengusScraper,
    Source.HORARO: HoraroScraper,
}

GENERIC_ERROR_MESSAGE = "An unexpected error occurred while calculating statistics."


class PipelineOrchestrator:
    """Runs resolution, classification and aggregation for one canonical event."""

    def __init__(self, resolver: PronounResolver):
        self.resolver = resolver

    async def resolve_all(self, event: NormalizedEvent) -> List[ResolvedRunner]:
        """Resolves every runner concurrently; results follow the event's runner order."""
        logger.info(f"Resolving pronouns for {len(event.runners)} runners of '{event.name}'")
        return list(
            await asyncio.gather(
                *(self.resolver.resolve(runner) for runner in event.runners)
            )
        )

    async def run(self, event: NormalizedEvent) -> AggregationResult:
        resolved = await self.resolve_all(event)
        classified = [classify_runner(runner) for runner in resolved]

        schedule = None
        if event.scheduled is not None:
            by_identifier = {runner.identifier: runner for runner in classified}
            schedule = aggregate_schedule(event.scheduled, by_identifier)

        return AggregationResult(
            name=event.name,
            submissions=aggregate(classified),
            schedule=schedule,
        )


def build_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers={"Accept": "application/json"},
    )


async def calculate_for_source(
    source: Source,
    locator: str,
    client: Optional[httpx.AsyncClient] = None,
    cache: Optional[TTLCache] = None,
    max_attempts: Optional[int] = None,
) -> Dict[str, Any]:
    """Fetches, normalizes and aggregates one event.

    Returns the JSON-serializable result, or ``{"error": message}`` when the
    event cannot be obtained or processed.
    """
    owns_client = client is None
    client = client or build_http_client()
    try:
        scraper = EVENT_SCRAPERS[source](client=client, max_attempts=max_attempts)
        raw_payload = await scraper.fetch_event(locator)
        event = Normalizer().normalize(raw_payload, source)

        resolver = PronounResolver(
            speedruncom=SpeedrunComClient(client=client, max_attempts=max_attempts),
            alejo=AlejoPronounsClient(client=client, max_attempts=max_attempts),
            cache=cache,
        )
        result = await PipelineOrchestrator(resolver).run(event)
        logger.success(f"Calculated statistics for '{result.name}'")
        return result.to_json()
    except NormalizationError as e:
        logger.warning(f"Could not normalize {source.value} event {locator}: {e}")
        return {"error": str(e)}
    except ScraperError as e:
        logger.error(f"Could not fetch {source.value} event {locator}: {e}")
        return {"error": str(e)}
    except Exception:
        logger.exception(f"Unexpected error calculating {source.value} event {locator}")
        return {"error": GENERIC_ERROR_MESSAGE}
    finally:
        if owns_client:
            await client.aclose()
