"""Pydantic models for the stop/line dataset."""

import re
from enum import Enum

from pydantic import BaseModel, Field

# Line refs that are numbered outside the 1-42 range but run as regular lines
REGULAR_LINE_EXCEPTIONS = frozenset({"NAVETTE CAEN", "NOCTIBUS"})

REGULAR_LINE_RANGE = (1, 42)
COMPLEMENTARY_LINE_MIN = 100

LEADING_NUMBER = re.compile(r"^\s*(\d+)")

StopId = int | str


class Network(str, Enum):
    """Transit network a stop or line belongs to."""

    TRAM = "tram"
    BUS = "bus"


class LineCategory(str, Enum):
    """Line category used to gate bus content."""

    TRAM = "tram"
    REGULAR = "regular"
    COMPLEMENTARY = "complementary"


def classify_line(ref: str) -> LineCategory:
    """Derive the category of a line from its reference code.

    Examples:
        "T1" -> TRAM
        "23" -> REGULAR
        "NOCTIBUS" -> REGULAR
        "104" -> COMPLEMENTARY
        "TAD" -> TRAM (any T-prefixed ref)
        "Express" -> COMPLEMENTARY (fallback)
    """
    cleaned = ref.strip().upper()
    if cleaned.startswith("T"):
        return LineCategory.TRAM
    if cleaned in REGULAR_LINE_EXCEPTIONS:
        return LineCategory.REGULAR

    match = LEADING_NUMBER.match(cleaned)
    if match:
        number = int(match.group(1))
        low, high = REGULAR_LINE_RANGE
        if low <= number <= high:
            return LineCategory.REGULAR
        if number >= COMPLEMENTARY_LINE_MIN:
            return LineCategory.COMPLEMENTARY

    return LineCategory.COMPLEMENTARY


class Stop(BaseModel):
    """A physical stopping point (platform/pole) on one line."""

    id: StopId
    name: str
    aliases: list[str] = Field(default_factory=list)
    lat: float | None = None
    lon: float | None = None
    line_ref: str
    network: Network
    operator: str | None = None
    stop_group: int | None = None  # shared by platforms of the same place

    @property
    def category(self) -> LineCategory:
        return classify_line(self.line_ref)


class Line(BaseModel):
    """A transit line."""

    ref: str
    name: str
    color_hex: str | None = None
    network: Network
    geojson: str | None = None  # opaque, never interpreted

    @property
    def category(self) -> LineCategory:
        return classify_line(self.ref)


def stop_id_sort_key(stop_id: StopId) -> tuple[bool, int | str]:
    """Sort key ordering integer ids numerically before string ids."""
    return (isinstance(stop_id, str), stop_id)
