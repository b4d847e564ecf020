from typing import Awaitable, Callable, List, Optional

from loguru import logger

from marathon_pronouns.config.settings import settings
from marathon_pronouns.models.enums import Platform
from marathon_pronouns.models.runner import ResolvedRunner, Runner
from marathon_pronouns.scrapers.base_scraper import ScraperError
from marathon_pronouns.scrapers.lookup_clients import (
    AlejoPronounsClient,
    SpeedrunComClient,
)
from .cache import TTLCache

# pronouns.alejo.io codes with a dedicated category; any other code is "other"
ALEJO_PRONOUN_CODES = {
    "hehim": "he/him",
    "sheher": "she/her",
}

# Shared by every request in the process
runner_cache = TTLCache(ttl_seconds=settings.cache_ttl_seconds)

Strategy = Callable[[Runner], Awaitable[Optional[str]]]


class LookupFailure(Exception):
    """An external lookup for a single runner failed."""

    pass


class PronounResolver:
    """Fills in missing runner pronouns by trying each strategy in order.

    Order: declared pronoun, cache, speedrun.com, pronouns.alejo.io. The first
    strategy to return a value wins; a lookup failure marks the runner as
    failed instead of propagating.
    """

    def __init__(
        self,
        speedruncom: SpeedrunComClient,
        alejo: AlejoPronounsClient,
        cache: Optional[TTLCache] = None,
    ):
        self.speedruncom = speedruncom
        self.alejo = alejo
        self.cache = cache if cache is not None else runner_cache
        self.strategies: List[Strategy] = [
            self._declared,
            self._cached,
            self._from_speedruncom,
            self._from_alejo,
        ]

    async def resolve(self, runner: Runner) -> ResolvedRunner:
        try:
            for strategy in self.strategies:
                pronoun = await strategy(runner)
                if pronoun is not None:
                    return ResolvedRunner.from_runner(runner, pronoun)
        except LookupFailure as e:
            logger.error(f"Pronoun lookup failed for {runner.identifier}: {e}")
            return ResolvedRunner.failed(runner)

        logger.debug(f"No pronouns found for {runner.identifier}")
        return ResolvedRunner.from_runner(runner, None)

    async def _declared(self, runner: Runner) -> Optional[str]:
        if runner.declared_pronoun and runner.declared_pronoun.strip():
            return runner.declared_pronoun
        return None

    async def _cached(self, runner: Runner) -> Optional[str]:
        pronoun = self.cache.get(runner.identifier)
        if pronoun is not None:
            logger.debug(f"Cache hit for {runner.identifier}")
        return pronoun

    async def _from_speedruncom(self, runner: Runner) -> Optional[str]:
        try:
            pronouns = await self.speedruncom.fetch_pronouns(
                runner.handle_for(Platform.SPEEDRUNCOM)
            )
        except ScraperError as e:
            raise LookupFailure(f"speedrun.com: {e}") from e

        if not pronouns:
            return None
        pronouns = pronouns.lower()
        self.cache.set(runner.identifier, pronouns)
        return pronouns

    async def _from_alejo(self, runner: Runner) -> Optional[str]:
        try:
            code = await self.alejo.fetch_pronoun_id(runner.handle_for(Platform.TWITCH))
        except ScraperError as e:
            raise LookupFailure(f"pronouns.alejo.io: {e}") from e

        if code is None:
            return None
        pronouns = ALEJO_PRONOUN_CODES.get(code, "other")
        self.cache.set(runner.identifier, pronouns)
        return pronouns
