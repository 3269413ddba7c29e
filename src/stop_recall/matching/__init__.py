"""Exact and fuzzy matching of guesses against stop names."""

from stop_recall.matching.distance import fuzzy_threshold, levenshtein
from stop_recall.matching.models import GuessResolution, MatchOptions, MatchType
from stop_recall.matching.normalizers import (
    DEFAULT_CITY_NAMES,
    normalize_text,
    remove_accents,
    strip_city_names,
)
from stop_recall.matching.stop_matcher import (
    MAX_FUZZY_CANDIDATES,
    match_stops,
    resolve_guess,
)

__all__ = [
    # Matchers
    "match_stops",
    "resolve_guess",
    "MAX_FUZZY_CANDIDATES",
    # Distance
    "levenshtein",
    "fuzzy_threshold",
    # Models
    "GuessResolution",
    "MatchOptions",
    "MatchType",
    # Normalizers
    "DEFAULT_CITY_NAMES",
    "normalize_text",
    "remove_accents",
    "strip_city_names",
]
