import re
from typing import Optional

from marathon_pronouns.models.enums import Category
from marathon_pronouns.models.runner import ClassifiedRunner, ResolvedRunner

# Forms accepted after normalize_pronoun()
HE_HIM_PRONOUN_SETS = frozenset({"he/him", "he", "him"})
SHE_HER_PRONOUN_SETS = frozenset({"she/her", "she", "her"})

_SLASH_SPACING = re.compile(r"\s*/\s*")


def normalize_pronoun(pronoun: str) -> str:
    """Lowercases and trims, dropping whitespace around slashes ("He / Him" -> "he/him")."""
    return _SLASH_SPACING.sub("/", pronoun.strip().lower())


def category_for(pronoun: Optional[str]) -> Category:
    if pronoun is None or not pronoun.strip():
        return Category.NONE

    normalized = normalize_pronoun(pronoun)
    if normalized in HE_HIM_PRONOUN_SETS:
        return Category.HE_HIM
    if normalized in SHE_HER_PRONOUN_SETS:
        return Category.SHE_HER
    return Category.OTHER


def classify(runner: ResolvedRunner) -> Category:
    if runner.lookup_failed:
        return Category.ERROR
    return category_for(runner.resolved_pronoun)


def classify_runner(runner: ResolvedRunner) -> ClassifiedRunner:
    return ClassifiedRunner(identifier=runner.identifier, category=classify(runner))
