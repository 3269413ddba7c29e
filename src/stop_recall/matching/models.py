from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field

from stop_recall.models.transit import StopId


class MatchType(str, Enum):
    """How a guess was matched."""

    EXACT_NAME = "exact_name"  # Normalized name equals the guess
    EXACT_ALIAS = "exact_alias"  # Normalized alias equals the guess
    FUZZY = "fuzzy"  # Within the edit-distance threshold


@dataclass(frozen=True)
class MatchOptions:
    """Deployment-specific matching switches.

    Alias matching and city-name stripping are independent of each other.
    """

    match_aliases: bool = True
    city_names: tuple[str, ...] = ()


class GuessResolution(BaseModel):
    """Result of resolving one guess against the unlocked stops."""

    query: str = Field(description="Original guess text")
    normalized_query: str = Field(description="Guess after normalization")
    stop_ids: set[StopId] = Field(
        default_factory=set, description="Matched stop ids, group members included"
    )
    match_type: MatchType | None = Field(
        default=None, description="Type of match, None when nothing matched"
    )
    candidate_count: int = Field(
        default=0, description="Stops that matched before group expansion"
    )
    ambiguous: bool = Field(
        default=False, description="True if too many fuzzy candidates were rejected"
    )
