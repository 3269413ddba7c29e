from pydantic import BaseModel, Field

from stop_recall.models.transit import LineCategory, Network
from stop_recall.progression.phases import Phase, ProgressionVariant


class PhaseProgress(BaseModel):
    """Progress towards leaving one non-terminal phase."""

    phase: Phase
    found: int = Field(description="Found stops within the phase's scope")
    total: int = Field(description="Stops within the phase's scope")
    ratio: float = Field(description="found / total (0-1)")
    threshold: float = Field(description="Ratio needed to unlock the next phase")
    reached: bool = Field(description="True if ratio >= threshold")


class ProgressReport(BaseModel):
    """Snapshot of the player's progression, derived from the found set."""

    variant: ProgressionVariant
    phase: Phase = Field(description="Current phase")
    networks: frozenset[Network] = Field(description="Networks unlocked by the current phase")
    categories: frozenset[LineCategory] | None = Field(
        description="Line categories unlocked by the current phase (None: no category split)"
    )
    phases: list[PhaseProgress] = Field(
        default_factory=list, description="Progress for each phase evaluated so far"
    )
