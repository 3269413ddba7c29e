"""MCP application instance.

This module exists to avoid circular import issues when running with `python -m`.
All tool modules should import `mcp` from here, not from server.py.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from mcp.server.fastmcp import Context, FastMCP

from stop_recall.data.config import get_settings
from stop_recall.data.provider import StopLineProvider
from stop_recall.data.storage import ProgressStore
from stop_recall.services.game_service import GameService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Objects built once at startup and shared by every tool call."""

    service: GameService


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Load the dataset and open the progress store for the server's lifetime."""
    settings = get_settings()
    provider = await StopLineProvider.load(settings.db_path)
    store = ProgressStore(settings.progress_path, settings.storage_prefix)
    logger.info(f"Game ready ({settings.progression_variant.value} progression)")
    yield AppContext(service=GameService(provider, store, settings))


def get_service(ctx: Context) -> GameService:
    """Game service of the running server."""
    return ctx.request_context.lifespan_context.service


# Initialize the MCP server
mcp = FastMCP(
    "Stop Recall",
    instructions="Transit stop memory game - guess stop names to unlock tram, bus and complementary lines",
    lifespan=app_lifespan,
)
