"""Tests for game settings."""

from pathlib import Path

import pytest

from stop_recall.data.config import GameSettings
from stop_recall.matching.normalizers import DEFAULT_CITY_NAMES
from stop_recall.progression.phases import ProgressionVariant


def test_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)  # no .env file
    settings = GameSettings()

    assert settings.db_path == Path("data/stops.db")
    assert settings.storage_prefix == "memorypourcaen_"
    assert settings.progression_variant == ProgressionVariant.THREE_PHASE
    assert settings.match_aliases is True
    assert tuple(settings.city_names) == DEFAULT_CITY_NAMES


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STOP_RECALL_DB_PATH", "/srv/stops.db")
    monkeypatch.setenv("STOP_RECALL_PROGRESSION", "two_phase")
    monkeypatch.setenv("STOP_RECALL_MATCH_ALIASES", "false")
    monkeypatch.setenv("STOP_RECALL_CITY_NAMES", '["rouen"]')

    settings = GameSettings()

    assert settings.db_path == Path("/srv/stops.db")
    assert settings.progression_variant == ProgressionVariant.TWO_PHASE
    assert settings.match_aliases is False
    assert settings.city_names == ["rouen"]


def test_env_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("STOP_RECALL_STORAGE_PREFIX=test_\n")

    assert GameSettings().storage_prefix == "test_"


def test_match_options() -> None:
    options = GameSettings(match_aliases=False, city_names=["caen"]).match_options()
    assert options.match_aliases is False
    assert options.city_names == ("caen",)


def test_match_options_without_city_stripping() -> None:
    options = GameSettings(strip_city_names=False).match_options()
    assert options.match_aliases is True
    assert options.city_names == ()
