import logging
from collections.abc import Iterable, Sequence

from stop_recall.matching.distance import DistanceFn, fuzzy_threshold, levenshtein
from stop_recall.matching.models import GuessResolution, MatchOptions, MatchType
from stop_recall.matching.normalizers import normalize_text
from stop_recall.models.transit import Stop, StopId

logger = logging.getLogger(__name__)

# More fuzzy candidates than this means the guess is too vague to resolve
MAX_FUZZY_CANDIDATES = 5

DEFAULT_OPTIONS = MatchOptions()


def _candidate_names(stop: Stop, options: MatchOptions) -> list[str]:
    """Normalized name first, then aliases when alias matching is enabled."""
    names = [normalize_text(stop.name, options.city_names)]
    if options.match_aliases:
        names.extend(normalize_text(alias, options.city_names) for alias in stop.aliases)
    return names


def _expand_groups(matched: Iterable[Stop], available_stops: Sequence[Stop]) -> set[StopId]:
    """Add every available stop sharing a non-null stop_group with a match."""
    stop_ids: set[StopId] = set()
    groups: set[int] = set()
    for stop in matched:
        stop_ids.add(stop.id)
        if stop.stop_group is not None:
            groups.add(stop.stop_group)

    if groups:
        stop_ids.update(s.id for s in available_stops if s.stop_group in groups)
    return stop_ids


def _exact_matches(
    normalized_guess: str, available_stops: Sequence[Stop], options: MatchOptions
) -> tuple[list[Stop], MatchType | None]:
    by_name: list[Stop] = []
    by_alias: list[Stop] = []
    for stop in available_stops:
        name, *aliases = _candidate_names(stop, options)
        if name == normalized_guess:
            by_name.append(stop)
        elif normalized_guess in aliases:
            by_alias.append(stop)

    if by_name:
        return by_name + by_alias, MatchType.EXACT_NAME
    if by_alias:
        return by_alias, MatchType.EXACT_ALIAS
    return [], None


def _fuzzy_matches(
    normalized_guess: str,
    available_stops: Sequence[Stop],
    distance_fn: DistanceFn,
    options: MatchOptions,
) -> list[Stop]:
    candidates: list[Stop] = []
    for stop in available_stops:
        for name in _candidate_names(stop, options):
            if not name:
                continue
            if distance_fn(normalized_guess, name) <= fuzzy_threshold(name):
                # First qualifying name is enough
                candidates.append(stop)
                break
    return candidates


def resolve_guess(
    guess: str,
    available_stops: Sequence[Stop],
    distance_fn: DistanceFn = levenshtein,
    options: MatchOptions = DEFAULT_OPTIONS,
) -> GuessResolution:
    """Resolve a free-text guess to the stops it identifies.

    Resolution strategy (priority order):
    1. Exact match on normalized name or alias -> all exact hits plus their groups
    2. Fuzzy match within the length-dependent edit threshold
       - more than MAX_FUZZY_CANDIDATES stops -> rejected as ambiguous
       - otherwise all candidates plus their groups

    The caller is responsible for passing only the stops the player has unlocked.

    Args:
        guess: Raw player input
        available_stops: Unlocked stops to search through
        distance_fn: Edit-distance function (defaults to Levenshtein)
        options: Alias matching and city-name stripping switches

    Returns:
        GuessResolution with the matched stop ids (empty when nothing matched)
    """
    normalized_guess = normalize_text(guess, options.city_names)
    if not normalized_guess:
        return GuessResolution(query=guess, normalized_query=normalized_guess)

    # 1. Exact pass short-circuits fuzzy matching
    exact, match_type = _exact_matches(normalized_guess, available_stops, options)
    if exact:
        return GuessResolution(
            query=guess,
            normalized_query=normalized_guess,
            stop_ids=_expand_groups(exact, available_stops),
            match_type=match_type,
            candidate_count=len(exact),
        )

    # 2. Fuzzy pass
    candidates = _fuzzy_matches(normalized_guess, available_stops, distance_fn, options)
    if len(candidates) > MAX_FUZZY_CANDIDATES:
        logger.debug(f"Rejected ambiguous guess {guess!r}: {len(candidates)} candidates")
        return GuessResolution(
            query=guess,
            normalized_query=normalized_guess,
            candidate_count=len(candidates),
            ambiguous=True,
        )

    if not candidates:
        return GuessResolution(query=guess, normalized_query=normalized_guess)

    return GuessResolution(
        query=guess,
        normalized_query=normalized_guess,
        stop_ids=_expand_groups(candidates, available_stops),
        match_type=MatchType.FUZZY,
        candidate_count=len(candidates),
    )


def match_stops(
    guess: str,
    available_stops: Sequence[Stop],
    distance_fn: DistanceFn = levenshtein,
    options: MatchOptions = DEFAULT_OPTIONS,
) -> set[StopId]:
    """Return the ids of the stops a guess identifies, possibly empty."""
    return resolve_guess(guess, available_stops, distance_fn, options).stop_ids
