import re
import unicodedata
from functools import lru_cache

# Communes of Caen la Mer commonly appended to stop names
DEFAULT_CITY_NAMES: tuple[str, ...] = (
    "caen",
    "herouville",
    "herouville saint clair",
    "mondeville",
    "ifs",
    "fleury sur orne",
    "cormelles le royal",
)

HYPHENS = re.compile(r"[-‐‑‒–—]")


@lru_cache(maxsize=4096)
def remove_accents(text: str) -> str:
    """Remove accents from text.

    Example: "Hérouville" -> "Herouville"
    """
    # Normalize to NFD (decomposes accented characters)
    normalized = unicodedata.normalize("NFD", text)
    # Remove combining diacritical marks
    return "".join(c for c in normalized if unicodedata.category(c) != "Mn")


def _basic_normalize(text: str) -> str:
    result = remove_accents(text.lower())
    result = HYPHENS.sub(" ", result)
    return " ".join(result.split())


@lru_cache(maxsize=256)
def _city_patterns(city_names: tuple[str, ...]) -> tuple[re.Pattern[str], ...]:
    # Longest first so "herouville saint clair" wins over "herouville"
    cleaned = {_basic_normalize(city) for city in city_names}
    ordered = sorted((c for c in cleaned if c), key=len, reverse=True)
    return tuple(re.compile(rf"\b{re.escape(city)}\b") for city in ordered)


def strip_city_names(text: str, city_names: tuple[str, ...]) -> str:
    """Remove whole-word city names from already normalized text.

    Repeats until nothing changes so the result is stable under re-application.

    Example: "theatre caen" -> "theatre"
    """
    patterns = _city_patterns(city_names)
    result = text
    while True:
        stripped = result
        for pattern in patterns:
            stripped = pattern.sub("", stripped)
        stripped = " ".join(stripped.split())
        if stripped == result:
            return result
        result = stripped


@lru_cache(maxsize=8192)
def normalize_text(text: str, city_names: tuple[str, ...] = ()) -> str:
    """Normalize a stop name or guess for comparison.

    - Converts to lowercase
    - Removes accents
    - Replaces hyphens with spaces
    - Normalizes whitespace
    - Optionally strips city names (kept when nothing else would remain)

    Example: "Hôtel-de-Ville" -> "hotel de ville"
    Example: "Théâtre Caen" -> "theatre" (with city_names=("caen",))
    Example: "Mondeville" -> "mondeville" (with city_names=("mondeville",))
    """
    if not text:
        return ""

    result = _basic_normalize(text)

    if city_names:
        stripped = strip_city_names(result, city_names)
        if stripped:
            result = stripped

    return result
