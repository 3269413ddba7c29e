"""Dataset loader for building the stop/line SQLite database from CSV files."""

import csv
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import aiosqlite

from stop_recall.models.transit import Network

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
-- stops (one row per stop and line; platforms of one place share stop_group)
-- seq keeps file order; id is an integer or a string as given in the dataset
CREATE TABLE stops (
    seq INTEGER PRIMARY KEY,
    id UNIQUE,
    name TEXT NOT NULL,
    aliases TEXT,
    lat REAL,
    lon REAL,
    line_ref TEXT NOT NULL,
    network TEXT NOT NULL,
    operator TEXT,
    stop_group INTEGER
);

-- lines
CREATE TABLE lines (
    id INTEGER PRIMARY KEY,
    ref TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    color_hex TEXT,
    network TEXT NOT NULL,
    geojson TEXT
);
"""

INDEX_SQL = """
CREATE INDEX idx_stops_line_ref ON stops(line_ref);
CREATE INDEX idx_stops_group ON stops(stop_group);
CREATE INDEX idx_lines_network ON lines(network);
"""

# Table definitions: table_name -> (csv_filename, columns)
TABLE_DEFINITIONS: dict[str, tuple[str, list[str]]] = {
    "stops": (
        "stops.csv",
        [
            "id",
            "name",
            "aliases",
            "lat",
            "lon",
            "line_ref",
            "network",
            "operator",
            "stop_group",
        ],
    ),
    "lines": (
        "lines.csv",
        ["ref", "name", "color_hex", "network", "geojson"],
    ),
}

# Columns that must be present in the header and non-empty in each row.
REQUIRED_COLUMNS: dict[str, list[str]] = {
    "stops": ["name", "line_ref", "network"],
    "lines": ["ref", "name", "network"],
}

VALID_NETWORKS = frozenset(n.value for n in Network)


def _parse_stop_id(value: str) -> int | str:
    """Integer ids stay integers; anything else (e.g. "node/1") is kept as text."""
    try:
        return int(value)
    except ValueError:
        return value


# Typed columns: rows whose value doesn't parse are skipped
COLUMN_PARSERS: dict[str, Callable[[str], Any]] = {
    "id": _parse_stop_id,
    "lat": float,
    "lon": float,
    "stop_group": int,
}

# Chunk size for bulk inserts
CHUNK_SIZE = 5000


class DatasetLoader:
    """Loader for ingesting a CSV stop/line dataset into SQLite."""

    def __init__(self, db_path: Path):
        """Initialize the loader.

        Args:
            db_path: Path where the SQLite database will be created.
        """
        self.db_path = Path(db_path)

    async def ingest(self, dataset_path: Path) -> dict[str, int]:
        """Ingest stops.csv and lines.csv from a directory into SQLite.

        Uses atomic swap: loads into temp DB, then replaces the target DB.

        Args:
            dataset_path: Directory containing stops.csv and lines.csv.

        Returns:
            Dictionary with row counts per table.

        Raises:
            FileNotFoundError: If the dataset directory doesn't exist.
            ValueError: If a required file or column is missing, or a table is empty.
        """
        dataset_path = Path(dataset_path)
        if not dataset_path.is_dir():
            raise FileNotFoundError(f"Dataset directory not found: {dataset_path}")

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        temp_db = self.db_path.with_suffix(".tmp.db")

        try:
            # Remove temp db if it exists from a previous failed run
            temp_db.unlink(missing_ok=True)

            async with aiosqlite.connect(temp_db) as db:
                await db.execute("PRAGMA journal_mode=OFF")
                await db.execute("PRAGMA synchronous=OFF")

                await db.executescript(SCHEMA_SQL)
                row_counts = await self._load_all_tables(db, dataset_path)
                # stops without an id get their position in the file
                await db.execute("UPDATE stops SET id = seq WHERE id IS NULL")
                await db.executescript(INDEX_SQL)
                await db.commit()
                await self._verify_integrity(db)

            # atomic swap
            temp_db.replace(self.db_path)

            logger.info(f"Dataset ingestion complete: {self.db_path}")
            return row_counts

        except Exception:
            temp_db.unlink(missing_ok=True)
            raise

    async def _load_all_tables(
        self, db: aiosqlite.Connection, dataset_path: Path
    ) -> dict[str, int]:
        row_counts: dict[str, int] = {}
        for table_name, (csv_filename, columns) in TABLE_DEFINITIONS.items():
            csv_path = dataset_path / csv_filename
            if not csv_path.exists():
                raise ValueError(f"Required file {csv_filename} not found in {dataset_path}")
            row_counts[table_name] = await self._load_table(db, table_name, columns, csv_path)
        return row_counts

    async def _load_table(
        self,
        db: aiosqlite.Connection,
        table_name: str,
        columns: list[str],
        csv_path: Path,
    ) -> int:
        """Load a single CSV file into a table."""
        logger.info(f"Loading {table_name} from {csv_path.name}...")

        total_rows = 0
        skipped_rows = 0
        required = REQUIRED_COLUMNS.get(table_name, [])

        with open(csv_path, encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f)
            header_index = self._build_header_index(reader, columns, required, csv_path.name)
            present = [col for col in columns if col in header_index]

            placeholders = ",".join(["?"] * len(present))
            insert_sql = (
                f"INSERT INTO {table_name} ({','.join(present)}) VALUES ({placeholders})"
            )

            for chunk, skipped in self._iter_chunks(reader, header_index, present, required):
                skipped_rows += skipped
                if chunk:
                    await db.executemany(insert_sql, chunk)
                    total_rows += len(chunk)

        logger.info(
            f"  Loaded {total_rows:,} rows into {table_name}"
            + (f" (skipped {skipped_rows:,} invalid)" if skipped_rows else "")
        )
        return total_rows

    def _iter_chunks(
        self,
        reader: Iterator[list[str]],
        header_index: dict[str, int],
        columns: list[str],
        required: list[str],
    ) -> Iterator[tuple[list[tuple[Any, ...]], int]]:
        """Yield (rows, skipped_count) in chunks of CHUNK_SIZE valid rows."""
        chunk: list[tuple[Any, ...]] = []
        skipped = 0
        for row in reader:
            row_dict = self._row_from_index(row, header_index)
            if not self._is_valid_row(row_dict, required):
                skipped += 1
                continue
            try:
                values = tuple(self._convert_value(col, row_dict.get(col)) for col in columns)
            except ValueError:
                skipped += 1
                continue
            chunk.append(values)

            if len(chunk) >= CHUNK_SIZE:
                yield chunk, skipped
                chunk = []
                skipped = 0

        yield chunk, skipped

    def _convert_value(self, column: str, value: str | None) -> Any:
        """Convert CSV value to appropriate Python type.

        Raises:
            ValueError: If a typed column holds something that doesn't parse.
        """
        if value is None or value.strip() == "":
            return None
        parser = COLUMN_PARSERS.get(column, str)
        return parser(value.strip())

    def _is_valid_row(self, row: dict[str, str], required: list[str]) -> bool:
        """Return True if required columns are filled and the network is known."""
        for col in required:
            value = row.get(col)
            if value is None or value.strip() == "":
                return False
        network = row.get("network")
        return network is None or network.strip() in VALID_NETWORKS

    def _build_header_index(
        self,
        reader: Iterator[list[str]],
        columns: list[str],
        required: list[str],
        filename: str,
    ) -> dict[str, int]:
        """Map known column names to their position in the CSV header."""
        header = next(reader, None)
        if header is None:
            raise ValueError(f"{filename} is empty")
        expected = set(columns)
        header_index: dict[str, int] = {}
        for idx, name in enumerate(header):
            cleaned = name.strip()
            if cleaned in expected and cleaned not in header_index:
                header_index[cleaned] = idx
        missing = [col for col in required if col not in header_index]
        if missing:
            raise ValueError(f"{filename} missing columns: {', '.join(missing)}")
        return header_index

    def _row_from_index(self, row: list[str], header_index: dict[str, int]) -> dict[str, str]:
        """Map a CSV row list to a dict by header index."""
        row_dict: dict[str, str] = {}
        for col, idx in header_index.items():
            row_dict[col] = row[idx] if idx < len(row) else ""
        return row_dict

    async def _verify_integrity(self, db: aiosqlite.Connection) -> None:
        """Verify database integrity after loading."""
        logger.info("Verifying database integrity...")

        for table_name in TABLE_DEFINITIONS:
            async with db.execute(f"SELECT COUNT(*) FROM {table_name}") as cursor:
                row = await cursor.fetchone()
                if row is None or row[0] == 0:
                    raise ValueError(f"No {table_name} loaded - check dataset")

        logger.info("Database integrity verified")


async def get_table_counts(db_path: Path) -> dict[str, int]:
    """Get row counts for all tables in the database.

    Args:
        db_path: Path to the SQLite database.

    Returns:
        Dictionary mapping table names to row counts.
    """
    counts: dict[str, int] = {}
    async with aiosqlite.connect(db_path) as db:
        for table_name in TABLE_DEFINITIONS:
            async with db.execute(f"SELECT COUNT(*) FROM {table_name}") as cursor:
                row = await cursor.fetchone()
                counts[table_name] = row[0] if row else 0
    return counts
