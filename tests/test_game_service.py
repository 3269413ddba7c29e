"""Tests for the game service."""

import asyncio
from pathlib import Path
from typing import Any

import pytest

from stop_recall.data.config import GameSettings
from stop_recall.data.provider import StopLineProvider
from stop_recall.data.storage import FOUND_STOPS_KEY, ProgressStore
from stop_recall.matching.models import MatchType
from stop_recall.progression.phases import Phase, ProgressionVariant
from stop_recall.services.game_service import GameService


@pytest.fixture
async def provider(db_path: Path) -> StopLineProvider:
    return await StopLineProvider.load(db_path)


@pytest.fixture
def store(tmp_path: Path) -> ProgressStore:
    return ProgressStore(tmp_path / "progress.db")


@pytest.fixture
def settings(db_path: Path, tmp_path: Path) -> GameSettings:
    return GameSettings(db_path=db_path, progress_path=tmp_path / "progress.db")


@pytest.fixture
def service(
    provider: StopLineProvider, store: ProgressStore, settings: GameSettings
) -> GameService:
    return GameService(provider, store, settings)


class TestSubmitGuess:
    """Tests for guessing through the phases."""

    async def test_locked_stop_not_matched(self, service: GameService) -> None:
        """Bus stops can't be found during the tram phase."""
        response = await service.submit_guess("Place Courtonne")

        assert response.matched == []
        assert response.new_stop_ids == []
        assert response.phase == Phase.TRAM
        assert response.found_count == 0

    async def test_exact_guess_reveals_unlocked_group(self, service: GameService) -> None:
        response = await service.submit_guess("theatre")

        assert response.new_stop_ids == [1, 2]
        assert [stop.name for stop in response.matched] == ["Théâtre", "Théâtre - Quai 2"]
        assert response.match_type == MatchType.EXACT_NAME
        assert response.phase == Phase.TRAM
        assert response.unlocked is False

    async def test_repeated_guess(self, service: GameService) -> None:
        await service.submit_guess("theatre")
        response = await service.submit_guess("Théâtre")

        assert response.new_stop_ids == []
        assert response.already_found_ids == [1, 2]
        assert response.found_count == 2

    async def test_progression_through_phases(self, service: GameService) -> None:
        await service.submit_guess("theatre")  # 2 / 5 tram stops

        response = await service.submit_guess("Hotel de Vlle")  # 3 / 5
        assert response.new_stop_ids == [3]
        assert response.match_type == MatchType.FUZZY
        assert response.phase_before == Phase.TRAM
        assert response.phase == Phase.REGULAR_BUS
        assert response.unlocked is True

        # Regular progress: 4 of 12 tram + regular stops
        response = await service.submit_guess("Place Courtonne")
        assert response.new_stop_ids == [6]
        assert response.phase == Phase.COMPLEMENTARY

        # The bus platform of Théâtre is now reachable
        response = await service.submit_guess("theatre")
        assert response.new_stop_ids == [11]
        assert response.already_found_ids == [1, 2]

        # Complementary line, city name stripped from the stop name
        response = await service.submit_guess("Mairie")
        assert response.new_stop_ids == [8]

    async def test_unmatched_guess(self, service: GameService) -> None:
        response = await service.submit_guess("Nowhere at all")

        assert response.matched == []
        assert response.match_type is None
        assert response.ambiguous is False

    async def test_empty_guess(self, service: GameService) -> None:
        response = await service.submit_guess("  ")
        assert response.matched == []
        assert response.found_count == 0

    async def test_two_phase_variant(
        self, provider: StopLineProvider, store: ProgressStore, settings: GameSettings
    ) -> None:
        settings = settings.model_copy(
            update={"progression_variant": ProgressionVariant.TWO_PHASE}
        )
        service = GameService(provider, store, settings)

        await service.submit_guess("theatre")
        response = await service.submit_guess("Tour Leroy")

        assert response.phase == Phase.BUS

        response = await service.submit_guess("Mairie")
        assert response.new_stop_ids == [8]


class TestPersistence:
    """Tests for saving and restoring the found set."""

    async def test_found_set_saved(self, service: GameService, store: ProgressStore) -> None:
        await service.submit_guess("theatre")
        assert await store.load(FOUND_STOPS_KEY) == [1, 2]

    async def test_found_set_restored(
        self,
        service: GameService,
        provider: StopLineProvider,
        store: ProgressStore,
        settings: GameSettings,
    ) -> None:
        await service.submit_guess("theatre")
        await service.submit_guess("Tour Leroy")

        restored = GameService(provider, store, settings)
        assert await restored.get_found_stops() == {1, 2, 4}
        progress = await restored.get_progress()
        assert progress.progress.phase == Phase.REGULAR_BUS

    async def test_malformed_saved_progress(
        self, service: GameService, store: ProgressStore
    ) -> None:
        await store.save(FOUND_STOPS_KEY, {"not": "a list"})
        assert await service.get_found_stops() == set()

    async def test_reset(self, service: GameService, store: ProgressStore) -> None:
        await service.submit_guess("theatre")
        await service.reset()

        assert await service.get_found_stops() == set()
        assert await store.load(FOUND_STOPS_KEY) is None
        progress = await service.get_progress()
        assert progress.found_count == 0
        assert progress.progress.phase == Phase.TRAM


class TestProgressAndLines:
    """Tests for progress reporting and unlocked lines."""

    async def test_get_progress(self, service: GameService) -> None:
        await service.submit_guess("theatre")
        response = await service.get_progress()

        assert response.found_count == 2
        assert response.total_stops == 13
        assert response.progress.phase == Phase.TRAM
        tram = response.progress.phases[0]
        assert (tram.found, tram.total) == (2, 5)

    async def test_list_lines_in_tram_phase(self, service: GameService) -> None:
        await service.submit_guess("theatre")
        response = await service.list_lines()

        assert [line.ref for line in response.lines] == ["T1", "T2"]
        t1 = response.lines[0]
        assert (t1.found, t1.total) == (2, 3)
        assert response.count == 2

    async def test_list_lines_after_unlock(self, service: GameService) -> None:
        await service.submit_guess("theatre")
        await service.submit_guess("Tour Leroy")
        response = await service.list_lines()

        assert [line.ref for line in response.lines] == ["T1", "T2", "3"]


class SlowLoadStore(ProgressStore):
    """Store whose loads yield to the event loop for a while."""

    async def load(self, key: str) -> Any | None:
        await asyncio.sleep(0.05)
        return await super().load(key)


class TestConcurrency:
    """Tests for guesses arriving while saved progress is loading."""

    async def test_concurrent_guesses_keep_every_find(
        self, provider: StopLineProvider, settings: GameSettings, tmp_path: Path
    ) -> None:
        store = SlowLoadStore(tmp_path / "slow.db")
        service = GameService(provider, store, settings)

        first, second = await asyncio.gather(
            service.submit_guess("theatre"), service.submit_guess("Tour Leroy")
        )

        assert first.new_stop_ids == [1, 2]
        assert second.new_stop_ids == [4]
        assert second.found_count == 3
        assert await service.get_found_stops() == {1, 2, 4}
        assert await store.load(FOUND_STOPS_KEY) == [1, 2, 4]

    async def test_reset_during_guess(
        self, provider: StopLineProvider, settings: GameSettings, tmp_path: Path
    ) -> None:
        store = SlowLoadStore(tmp_path / "slow.db")
        service = GameService(provider, store, settings)

        await asyncio.gather(service.submit_guess("theatre"), service.reset())

        assert await service.get_found_stops() == set()
        assert await store.load(FOUND_STOPS_KEY) is None
