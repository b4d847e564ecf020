from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import Category, Platform


class Runner(BaseModel):
    """A single named participant as it appears in a canonical event."""

    model_config = ConfigDict(frozen=True)  # Make instances immutable

    identifier: str  # Unique (case-sensitive) within one event
    declared_pronoun: Optional[str] = None
    # Handle used on each lookup platform, when the source recorded one
    external_handles: Dict[Platform, Optional[str]] = Field(default_factory=dict)

    def handle_for(self, platform: Platform) -> str:
        """The runner's handle on `platform`, falling back to the identifier."""
        return self.external_handles.get(platform) or self.identifier


class ResolvedRunner(Runner):
    """Runner augmented with the outcome of pronoun resolution."""

    resolved_pronoun: Optional[str] = None
    # Set when an external lookup failed; resolved_pronoun is then None
    lookup_failed: bool = False

    @classmethod
    def from_runner(
        cls, runner: Runner, resolved_pronoun: Optional[str]
    ) -> "ResolvedRunner":
        return cls(**runner.model_dump(), resolved_pronoun=resolved_pronoun)

    @classmethod
    def failed(cls, runner: Runner) -> "ResolvedRunner":
        return cls(**runner.model_dump(), lookup_failed=True)


class ClassifiedRunner(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str
    category: Category
