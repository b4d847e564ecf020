from enum import Enum


class Source(str, Enum):
    OENGUS = "oengus"
    HORARO = "horaro"
    # Add other event platforms as needed


class Platform(str, Enum):
    """Platforms whose handles are used to query pronoun lookup services."""

    SPEEDRUNCOM = "speedruncom"
    TWITCH = "twitch"


class Category(str, Enum):
    HE_HIM = "he/him"
    SHE_HER = "she/her"
    OTHER = "other"
    NONE = "none"  # No pronoun declared or found
    ERROR = "error"  # Lookup failed
    NOT_FOUND = "notFound"  # Schedule view only: no matching submission


SUBMISSION_CATEGORIES = (
    Category.NONE,
    Category.HE_HIM,
    Category.SHE_HER,
    Category.OTHER,
    Category.ERROR,
)
SCHEDULE_CATEGORIES = SUBMISSION_CATEGORIES + (Category.NOT_FOUND,)

# Categories left out of the normalized-percentage denominator
NORMALIZED_EXCLUDED = frozenset({Category.NONE, Category.ERROR})
