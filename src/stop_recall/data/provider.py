"""In-memory stop/line provider built from the SQLite dataset."""

import logging
from collections.abc import Collection, Sequence
from pathlib import Path

import aiosqlite

from stop_recall.data.database import get_db
from stop_recall.models.transit import Line, LineCategory, Network, Stop, StopId

logger = logging.getLogger(__name__)

ALIAS_SEPARATOR = "|"


def _row_to_stop(row: aiosqlite.Row) -> Stop:
    """Convert a database row to a Stop."""
    return Stop(
        id=row["id"],
        name=row["name"],
        aliases=[a for a in (row["aliases"] or "").split(ALIAS_SEPARATOR) if a],
        lat=float(row["lat"]) if row["lat"] is not None else None,
        lon=float(row["lon"]) if row["lon"] is not None else None,
        line_ref=row["line_ref"],
        network=Network(row["network"]),
        operator=row["operator"],
        stop_group=int(row["stop_group"]) if row["stop_group"] is not None else None,
    )


def _row_to_line(row: aiosqlite.Row) -> Line:
    """Convert a database row to a Line."""
    return Line(
        ref=row["ref"],
        name=row["name"],
        color_hex=row["color_hex"],
        network=Network(row["network"]),
        geojson=row["geojson"],
    )


class StopLineProvider:
    """Read-only queries over one loaded stop/line dataset.

    Construct one per dataset and pass it to whatever needs it:

        provider = await StopLineProvider.load(db_path)
        stops = provider.get_stops_for_line("T1")

    Line -> stops lookups are indexed once here, so repeated progression
    checks don't rescan the dataset. Build a new provider if the dataset
    changes.
    """

    def __init__(self, stops: Sequence[Stop], lines: Sequence[Line]) -> None:
        self._stops: list[Stop] = list(stops)
        self._lines: list[Line] = list(lines)

        self._stops_by_id: dict[StopId, Stop] = {}
        self._stops_by_line: dict[str, list[Stop]] = {}  # line_ref -> stops in travel order
        self._stops_by_group: dict[int, list[Stop]] = {}
        self._lines_by_ref: dict[str, Line] = {}

        for stop in self._stops:
            self._stops_by_id[stop.id] = stop
            self._stops_by_line.setdefault(stop.line_ref, []).append(stop)
            if stop.stop_group is not None:
                self._stops_by_group.setdefault(stop.stop_group, []).append(stop)

        for line in self._lines:
            self._lines_by_ref[line.ref] = line

        orphans = set(self._stops_by_line) - set(self._lines_by_ref)
        if orphans:
            logger.warning(f"Stops reference unknown lines: {', '.join(sorted(orphans))}")

    @classmethod
    async def load(cls, db_path: Path) -> "StopLineProvider":
        """Load every stop and line from the dataset database.

        Raises:
            FileNotFoundError: If the database file doesn't exist.
        """
        logger.info(f"Loading stop/line dataset from {db_path}...")

        async with get_db(db_path) as db:
            stops = await cls._load_stops(db)
            lines = await cls._load_lines(db)

        logger.info(f"Dataset loaded: {len(stops)} stops, {len(lines)} lines")
        return cls(stops, lines)

    @staticmethod
    async def _load_stops(db: aiosqlite.Connection) -> list[Stop]:
        query = """
            SELECT id, name, aliases, lat, lon, line_ref, network, operator, stop_group
            FROM stops
            ORDER BY seq
        """
        stops: list[Stop] = []
        async with db.execute(query) as cursor:
            async for row in cursor:
                try:
                    stops.append(_row_to_stop(row))
                except ValueError as e:
                    logger.warning(f"Skipping malformed stop {row['id']!r}: {e}")
        return stops

    @staticmethod
    async def _load_lines(db: aiosqlite.Connection) -> list[Line]:
        query = """
            SELECT ref, name, color_hex, network, geojson
            FROM lines
            ORDER BY id
        """
        async with db.execute(query) as cursor:
            return [_row_to_line(row) async for row in cursor]

    def get_all_stops(self) -> list[Stop]:
        return list(self._stops)

    def get_all_lines(self) -> list[Line]:
        return list(self._lines)

    def get_stop_by_id(self, stop_id: StopId) -> Stop | None:
        return self._stops_by_id.get(stop_id)

    def get_line(self, ref: str) -> Line | None:
        return self._lines_by_ref.get(ref)

    def get_stops_for_line(self, line_ref: str) -> list[Stop]:
        """Stops of a line in travel order, empty for unknown lines."""
        return list(self._stops_by_line.get(line_ref, ()))

    def get_stops_by_group(self, stop_group: int | None) -> list[Stop]:
        """All platforms of a stop group, empty when the group is None."""
        if stop_group is None:
            return []
        return list(self._stops_by_group.get(stop_group, ()))

    def get_lines_for_stop(self, stop_id: StopId) -> list[Line]:
        """Lines serving a stop.

        A stop row belongs to one line, so lines are collected over every stop
        with the same name or in the same stop group.
        """
        stop = self._stops_by_id.get(stop_id)
        if stop is None:
            return []

        name = stop.name.casefold()
        refs: set[str] = set()
        for other in self._stops:
            same_group = stop.stop_group is not None and other.stop_group == stop.stop_group
            if same_group or other.name.casefold() == name:
                refs.add(other.line_ref)

        return [line for line in self._lines if line.ref in refs]

    def get_active_stops(
        self,
        networks: Collection[Network],
        categories: Collection[LineCategory] | None = None,
    ) -> list[Stop]:
        """Stops within the unlocked networks and, if given, line categories."""
        return [
            stop
            for stop in self._stops
            if stop.network in networks and (categories is None or stop.category in categories)
        ]

    def get_active_lines(
        self,
        networks: Collection[Network],
        categories: Collection[LineCategory] | None = None,
    ) -> list[Line]:
        """Lines within the unlocked networks and, if given, line categories."""
        return [
            line
            for line in self._lines
            if line.network in networks and (categories is None or line.category in categories)
        ]
