"""Chat command handlers (!catch, !pokedex, !leaderboard)."""

from collections.abc import Awaitable, Callable

from kickdex.core.engine import GameEngine
from kickdex.core.types import CaptureTool, CatchOutcome, CatchResult, SpawnInfo
from kickdex.logging import get_logger

logger = get_logger(__name__)

LEADERBOARD_SIZE = 10

CommandHandler = Callable[[GameEngine, str, str], Awaitable[str]]


def spawn_announcement(spawn: SpawnInfo) -> str:
    """Chat line announcing a new spawn."""
    return f"A wild {spawn.name} appeared! Type !catch to try to catch it!"


def format_catch_reply(username: str, result: CatchResult) -> str:
    """Render a catch result for chat."""
    if result.ok:
        shiny = " (shiny!)" if result.shiny else ""
        return f"{username} caught {result.species_name}{shiny}!"
    if result.outcome is CatchOutcome.NO_SPAWN:
        return f"{username}, there's nothing to catch right now."
    if result.outcome is CatchOutcome.ALREADY_CAPTURED:
        return f"{username}, someone already caught it."
    if result.outcome is CatchOutcome.COOLDOWN:
        return f"{username}, you're on cooldown."
    if result.outcome is CatchOutcome.FAILED:
        return f"{username} tried to catch it but failed."
    return f"{username}: {result.outcome.value}"


async def cmd_catch(engine: GameEngine, username: str, args: str) -> str:
    """Handle !catch [ball]."""
    try:
        tool = CaptureTool.parse(args)
    except ValueError:
        balls = ", ".join(t.value for t in CaptureTool)
        return f"{username}, unknown ball. Use one of: {balls}."

    result = await engine.attempt_catch(username, tool)
    return format_catch_reply(username, result)


async def cmd_pokedex(engine: GameEngine, username: str, args: str) -> str:
    """Handle !pokedex."""
    rows = await engine.get_pokedex(username)
    if not rows:
        return f"{username}, your pokedex is empty."
    entries = ", ".join(
        f"{row.name} x{row.count}"
        + (f" (shiny x{row.shiny_count})" if row.shiny_count else "")
        for row in rows
    )
    return f"{username}'s pokedex: {entries}"


async def cmd_leaderboard(engine: GameEngine, username: str, args: str) -> str:
    """Handle !leaderboard."""
    rows = await engine.leaderboard(LEADERBOARD_SIZE)
    if not rows:
        return "Leaderboard is empty."
    ranking = " | ".join(
        f"{rank}. {row.participant_id} - {row.total_caught} (shiny {row.shiny_total})"
        for rank, row in enumerate(rows, start=1)
    )
    return f"Leaderboard: {ranking}"


COMMANDS: dict[str, CommandHandler] = {
    "!catch": cmd_catch,
    "!pokedex": cmd_pokedex,
    "!leaderboard": cmd_leaderboard,
}


async def handle_chat_command(engine: GameEngine, username: str, message: str) -> str | None:
    """Dispatch a chat line to its command and return the reply, if any."""
    text = (message or "").strip()
    if not text.startswith("!") or not username:
        return None

    command, _, args = text.partition(" ")
    handler = COMMANDS.get(command.lower())
    if handler is None:
        return None

    try:
        return await handler(engine, username, args.strip())
    except Exception as e:
        logger.error(
            "Error processing chat command",
            command=command.lower(),
            username=username,
            error=str(e),
        )
        return None
