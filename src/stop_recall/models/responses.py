"""Pydantic response models for game service operations and MCP tools."""

from pydantic import BaseModel, Field

from stop_recall.matching.models import MatchType
from stop_recall.models.transit import LineCategory, Network, StopId
from stop_recall.progression.models import ProgressReport
from stop_recall.progression.phases import Phase


class StopResult(BaseModel):
    """A stop as shown to the player."""

    id: StopId
    name: str
    line_ref: str
    network: Network
    lat: float | None = None
    lon: float | None = None
    stop_group: int | None = None


class LineResult(BaseModel):
    """A line as shown to the player."""

    ref: str
    name: str
    color_hex: str | None = None
    network: Network
    category: LineCategory
    found: int = Field(description="Stops of this line already found")
    total: int = Field(description="Stops on this line")


class GuessResponse(BaseModel):
    """Outcome of one guess."""

    query: str = Field(description="Original guess text")
    matched: list[StopResult] = Field(description="Stops identified by the guess")
    new_stop_ids: list[StopId] = Field(description="Matched stops not found before")
    already_found_ids: list[StopId] = Field(description="Matched stops already found")
    match_type: MatchType | None = Field(default=None, description="How the guess matched")
    ambiguous: bool = Field(
        default=False, description="True if the guess matched too many stops to be accepted"
    )
    phase_before: Phase = Field(description="Phase before this guess")
    phase: Phase = Field(description="Phase after this guess")
    found_count: int = Field(description="Total stops found so far")

    @property
    def unlocked(self) -> bool:
        return self.phase != self.phase_before


class ProgressResponse(BaseModel):
    """Current progression with found-stop totals."""

    progress: ProgressReport
    found_count: int
    total_stops: int


class LinesResponse(BaseModel):
    """Lines currently unlocked for the player."""

    lines: list[LineResult]
    count: int
