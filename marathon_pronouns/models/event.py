from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .enums import Source
from .runner import Runner


class NormalizedEvent(BaseModel):
    """Source-agnostic representation of a marathon roster and its schedule."""

    model_config = ConfigDict(frozen=True)

    source: Source
    name: str
    runners: List[Runner] = []
    # Runner identifiers in schedule order; entries may match no runner
    scheduled: Optional[List[str]] = None

    @field_validator("runners")
    @classmethod
    def identifiers_must_be_unique(cls, runners: List[Runner]) -> List[Runner]:
        seen = set()
        for runner in runners:
            if runner.identifier in seen:
                raise ValueError(f"Duplicate runner identifier: {runner.identifier!r}")
            seen.add(runner.identifier)
        return runners
