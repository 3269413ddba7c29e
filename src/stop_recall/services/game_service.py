"""Game service: sequences guess matching, found-set updates and progression."""

import asyncio
import logging

from stop_recall.data.config import GameSettings
from stop_recall.data.provider import StopLineProvider
from stop_recall.data.storage import FOUND_STOPS_KEY, ProgressStore
from stop_recall.matching.stop_matcher import resolve_guess
from stop_recall.models.responses import (
    GuessResponse,
    LineResult,
    LinesResponse,
    ProgressResponse,
    StopResult,
)
from stop_recall.models.transit import Stop, StopId, stop_id_sort_key
from stop_recall.progression.engine import compute_progress
from stop_recall.progression.models import ProgressReport

logger = logging.getLogger(__name__)


def _sorted_ids(stop_ids: set[StopId]) -> list[StopId]:
    return sorted(stop_ids, key=stop_id_sort_key)


def _stop_to_result(stop: Stop) -> StopResult:
    return StopResult(
        id=stop.id,
        name=stop.name,
        line_ref=stop.line_ref,
        network=stop.network,
        lat=stop.lat,
        lon=stop.lon,
        stop_group=stop.stop_group,
    )


class GameService:
    """One player's game over one dataset.

    The found set is the only state; the phase is recomputed from it on
    every call and never stored.
    """

    def __init__(
        self,
        provider: StopLineProvider,
        store: ProgressStore,
        settings: GameSettings,
    ):
        self.provider = provider
        self.store = store
        self.settings = settings
        self._found: set[StopId] | None = None
        # Serializes load -> match -> update -> save across concurrent requests
        self._lock = asyncio.Lock()

    async def _load_found(self) -> set[StopId]:
        """Found set, loaded from the store on first use. Caller holds the lock."""
        if self._found is None:
            stored = await self.store.load(FOUND_STOPS_KEY)
            if stored is None:
                self._found = set()
            elif isinstance(stored, list):
                self._found = {stop_id for stop_id in stored if isinstance(stop_id, int | str)}
            else:
                logger.warning(f"Ignoring malformed saved progress: {type(stored).__name__}")
                self._found = set()
        return self._found

    async def get_found_stops(self) -> set[StopId]:
        """Found stop ids, loaded from the store on first use."""
        async with self._lock:
            return set(await self._load_found())

    def _progress(self, found: set[StopId]) -> ProgressReport:
        return compute_progress(
            found,
            self.provider.get_all_lines(),
            self.provider,
            self.settings.progression_variant,
        )

    async def submit_guess(self, guess: str) -> GuessResponse:
        """Match a guess against the unlocked stops and record new finds."""
        async with self._lock:
            found = set(await self._load_found())
            before = self._progress(found)

            available = self.provider.get_active_stops(before.networks, before.categories)
            resolution = resolve_guess(guess, available, options=self.settings.match_options())

            new_ids = resolution.stop_ids - found
            if new_ids:
                found |= new_ids
                self._found = set(found)
                await self.store.save(FOUND_STOPS_KEY, _sorted_ids(found))
                logger.info(f"Guess {guess!r} found {len(new_ids)} new stop(s)")

        after = self._progress(found) if new_ids else before
        if after.phase != before.phase:
            logger.info(f"Unlocked phase {after.phase.value}")

        matched = [
            stop
            for stop_id in _sorted_ids(resolution.stop_ids)
            if (stop := self.provider.get_stop_by_id(stop_id)) is not None
        ]

        return GuessResponse(
            query=guess,
            matched=[_stop_to_result(stop) for stop in matched],
            new_stop_ids=_sorted_ids(new_ids),
            already_found_ids=_sorted_ids(resolution.stop_ids & (found - new_ids)),
            match_type=resolution.match_type,
            ambiguous=resolution.ambiguous,
            phase_before=before.phase,
            phase=after.phase,
            found_count=len(found),
        )

    async def get_progress(self) -> ProgressResponse:
        """Current phase and per-phase progress."""
        found = await self.get_found_stops()
        return ProgressResponse(
            progress=self._progress(found),
            found_count=len(found),
            total_stops=len(self.provider.get_all_stops()),
        )

    async def list_lines(self) -> LinesResponse:
        """Lines unlocked by the current phase with per-line found counts."""
        found = await self.get_found_stops()
        progress = self._progress(found)

        lines: list[LineResult] = []
        for line in self.provider.get_active_lines(progress.networks, progress.categories):
            stop_ids = {stop.id for stop in self.provider.get_stops_for_line(line.ref)}
            lines.append(
                LineResult(
                    ref=line.ref,
                    name=line.name,
                    color_hex=line.color_hex,
                    network=line.network,
                    category=line.category,
                    found=len(stop_ids & found),
                    total=len(stop_ids),
                )
            )
        return LinesResponse(lines=lines, count=len(lines))

    async def reset(self) -> None:
        """Forget every found stop."""
        async with self._lock:
            await self.store.clear()
            self._found = set()
        logger.info("Progress reset")
