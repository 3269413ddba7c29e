from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from stop_recall.matching.models import MatchOptions
from stop_recall.matching.normalizers import DEFAULT_CITY_NAMES
from stop_recall.progression.phases import ProgressionVariant


class GameSettings(BaseSettings):
    """Configuration for the dataset, saved progress, and game rules.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    db_path: Path = Field(default=Path("data/stops.db"), alias="STOP_RECALL_DB_PATH")
    progress_path: Path = Field(
        default=Path("data/progress.db"), alias="STOP_RECALL_PROGRESS_PATH"
    )
    storage_prefix: str = Field(default="memorypourcaen_", alias="STOP_RECALL_STORAGE_PREFIX")

    # Game rules
    progression_variant: ProgressionVariant = Field(
        default=ProgressionVariant.THREE_PHASE, alias="STOP_RECALL_PROGRESSION"
    )
    match_aliases: bool = Field(default=True, alias="STOP_RECALL_MATCH_ALIASES")
    strip_city_names: bool = Field(default=True, alias="STOP_RECALL_STRIP_CITY_NAMES")
    city_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CITY_NAMES), alias="STOP_RECALL_CITY_NAMES"
    )

    def match_options(self) -> MatchOptions:
        """Matching switches derived from the settings."""
        return MatchOptions(
            match_aliases=self.match_aliases,
            city_names=tuple(self.city_names) if self.strip_city_names else (),
        )


@lru_cache
def get_settings() -> GameSettings:
    """Get game configuration (cached singleton).

    Returns:
        GameSettings with values from .env file or environment variables.
    """
    return GameSettings()
