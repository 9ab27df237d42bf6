"""Administrative commands: seeding, manual spawns and Kick configuration."""

import argparse
import asyncio
from collections.abc import Sequence

from kickdex.bot import spawn_announcement
from kickdex.core import GameEngine
from kickdex.kick import CredentialManager, DeliveryQueue
from kickdex.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def seed(engine: GameEngine) -> int:
    """Seed the species catalog if it is empty."""
    inserted = await engine.ensure_catalog()
    logger.info("Seed complete", inserted=inserted)
    return inserted


async def spawn(
    engine: GameEngine,
    species_id: int | None = None,
    delivery: DeliveryQueue | None = None,
) -> bool:
    """Force a spawn now and announce it in chat; ``False`` if one is already active."""
    created = await engine.spawn_once(species_id)
    if created is None:
        logger.info("Spawn skipped", reason="already_active")
        return False
    logger.info("Spawned", species=created.name, expires_at=created.expires_at.isoformat())

    if delivery is not None:
        delivery.send(spawn_announcement(created))
        await delivery.join()
    return True


async def clear(engine: GameEngine) -> int:
    """Expire the active spawn."""
    expired = await engine.clear_active_spawn()
    logger.info("Clear complete", expired=expired)
    return expired


async def set_chatroom(
    credentials: CredentialManager, chatroom_id: int, channel_id: int | None
) -> None:
    await credentials.set_chat_routing(chatroom_id, channel_id)


async def store_token(
    credentials: CredentialManager,
    access_token: str,
    refresh_token: str | None,
    expires_in: int,
) -> None:
    await credentials.store_initial_credential(access_token, refresh_token, expires_in)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kickdex-admin", description=__doc__)
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("seed", help="seed the Generation I catalog")

    spawn_cmd = commands.add_parser("spawn", help="spawn a Pokemon now")
    spawn_cmd.add_argument("--species-id", type=int, default=None)

    commands.add_parser("clear", help="expire the active spawn")

    chatroom_cmd = commands.add_parser("set-chatroom", help="store Kick chat routing ids")
    chatroom_cmd.add_argument("chatroom_id", type=int)
    chatroom_cmd.add_argument("--channel-id", type=int, default=None)

    token_cmd = commands.add_parser("store-token", help="store an OAuth token pair")
    token_cmd.add_argument("access_token")
    token_cmd.add_argument("refresh_token")
    token_cmd.add_argument("--expires-in", type=int, default=3600)

    return parser


async def run_command(
    args: argparse.Namespace,
    engine: GameEngine,
    credentials: CredentialManager,
    delivery: DeliveryQueue | None = None,
) -> None:
    """Execute a parsed admin command."""
    if args.command == "seed":
        await seed(engine)
    elif args.command == "spawn":
        await spawn(engine, args.species_id, delivery)
    elif args.command == "clear":
        await clear(engine)
    elif args.command == "set-chatroom":
        await set_chatroom(credentials, args.chatroom_id, args.channel_id)
    elif args.command == "store-token":
        await store_token(credentials, args.access_token, args.refresh_token, args.expires_in)


async def main(argv: Sequence[str] | None = None) -> None:
    from kickdex.database import close_db, init_db
    from kickdex.main import (
        create_credentials,
        create_delivery,
        create_engine,
        create_kick_client,
    )

    args = build_parser().parse_args(argv)
    setup_logging()
    await init_db()

    client = create_kick_client()
    credentials = create_credentials(client)
    delivery = create_delivery(client, credentials)
    try:
        await run_command(args, create_engine(), credentials, delivery)
    finally:
        await delivery.stop()
        await client.aclose()
        await close_db()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
