"""MCP tools for playing the game."""

from mcp.server.fastmcp import Context

from stop_recall.app import get_service, mcp
from stop_recall.models.responses import GuessResponse, LinesResponse, ProgressResponse

MAX_GUESS_LENGTH = 200


@mcp.tool()
async def guess_stop(guess: str, ctx: Context) -> GuessResponse:
    """Guess the name of a transit stop.

    Case, accents, hyphens and trailing city names are ignored, and small
    typos are tolerated on the stops currently unlocked. Guesses matching
    too many stops are rejected as ambiguous.

    Examples:
        guess_stop("theatre")  # Finds every platform of "Théâtre"
        guess_stop("Hotel de Vlle")  # Typo for "Hôtel de Ville"

    Args:
        guess: Stop name as remembered by the player.

    Returns:
        GuessResponse with matched stops, the newly found ones, and the phase
        before and after the guess.
    """
    return await get_service(ctx).submit_guess(guess[:MAX_GUESS_LENGTH])


@mcp.tool()
async def get_progress(ctx: Context) -> ProgressResponse:
    """Get the current phase and progress towards the next unlock."""
    return await get_service(ctx).get_progress()


@mcp.tool()
async def list_lines(ctx: Context) -> LinesResponse:
    """List the lines unlocked so far with how many of their stops were found."""
    return await get_service(ctx).list_lines()


@mcp.tool()
async def reset_progress(ctx: Context) -> ProgressResponse:
    """Forget every found stop and start again from the tram phase."""
    service = get_service(ctx)
    await service.reset()
    return await service.get_progress()
