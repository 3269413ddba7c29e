"""Edit-distance primitive for fuzzy stop matching."""

from collections.abc import Callable

from rapidfuzz.distance import Levenshtein

DistanceFn = Callable[[str, str], int]

# Names longer than this tolerate two edits, shorter ones a single edit
LONG_NAME_LENGTH = 8
LONG_NAME_MAX_EDITS = 2
SHORT_NAME_MAX_EDITS = 1


def levenshtein(a: str, b: str) -> int:
    """Number of single-character insertions, deletions or substitutions."""
    return Levenshtein.distance(a, b)


def fuzzy_threshold(normalized_name: str) -> int:
    """Maximum edit distance accepted against a normalized name.

    Example: "hotel de ville" (14 chars) -> 2
    Example: "gare" -> 1
    """
    if len(normalized_name) > LONG_NAME_LENGTH:
        return LONG_NAME_MAX_EDITS
    return SHORT_NAME_MAX_EDITS
