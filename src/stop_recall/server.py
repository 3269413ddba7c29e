import argparse
import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel

from stop_recall.app import mcp
from stop_recall.data.config import get_settings


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


@mcp.tool()
def health() -> HealthResponse:
    """Check if the Stop Recall server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from stop_recall import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


async def run_ingest(dataset_path: Path, db_path: Path) -> None:
    """Run dataset ingestion."""
    from stop_recall.data.dataset_loader import DatasetLoader

    loader = DatasetLoader(db_path)
    row_counts = await loader.ingest(dataset_path)

    print("\nIngestion complete. Row counts:")
    for table, count in row_counts.items():
        print(f"  {table}: {count:,}")


async def run_reset(progress_path: Path, prefix: str) -> None:
    """Clear saved progress."""
    from stop_recall.data.storage import ProgressStore

    await ProgressStore(progress_path, prefix).clear()
    print("Saved progress cleared.")


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="stop-recall",
        description="Stop Recall transit memory game MCP server",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    # ingest command
    ingest_parser = subparsers.add_parser(
        "ingest",
        help="Build the stop/line SQLite database from stops.csv and lines.csv",
    )
    ingest_parser.add_argument(
        "dataset_path",
        type=Path,
        help="Directory containing stops.csv and lines.csv",
    )
    ingest_parser.add_argument(
        "--db",
        type=Path,
        default=settings.db_path,
        help="SQLite database path (default: data/stops.db or STOP_RECALL_DB_PATH env var)",
    )

    # reset command
    subparsers.add_parser(
        "reset",
        help="Clear saved progress",
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "ingest":
        asyncio.run(run_ingest(args.dataset_path, args.db))
    elif args.command == "reset":
        asyncio.run(run_reset(settings.progress_path, settings.storage_prefix))
    else:
        # Default: run MCP server (tools register on import)
        import stop_recall.tools.game_tools  # noqa: F401

        mcp.run()


if __name__ == "__main__":
    main()
