"""Main entry point for the Kickdex bot."""

import asyncio
import sys
from dataclasses import replace

from kickdex.bot import handle_chat_command, spawn_announcement
from kickdex.config import settings
from kickdex.core import GameEngine, SpawnScheduler
from kickdex.core.backoff import RECONNECT_BACKOFF
from kickdex.database import (
    SqlGameStore,
    SqlKeyValueStore,
    async_session_factory,
    close_db,
    init_db,
)
from kickdex.kick import ChatMessage, CredentialManager, DeliveryQueue, KickChatConnector, KickClient
from kickdex.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_engine() -> GameEngine:
    """Build the game engine on top of the SQL store."""
    return GameEngine(
        SqlGameStore(async_session_factory),
        spawn_duration_seconds=settings.spawn_duration_seconds,
        cooldown_seconds=settings.catch_cooldown_seconds,
        shiny_rate=settings.shiny_rate,
    )


def create_kick_client() -> KickClient:
    return KickClient(
        api_url=settings.kick_api_url,
        oauth_token_url=settings.kick_oauth_token_url,
        client_id=settings.kick_client_id,
        client_secret=settings.kick_client_secret,
    )


def create_credentials(client: KickClient) -> CredentialManager:
    return CredentialManager(
        SqlKeyValueStore(async_session_factory),
        client,
        refresh_margin_seconds=settings.token_refresh_margin_seconds,
    )


def create_delivery(client: KickClient, credentials: CredentialManager) -> DeliveryQueue:
    return DeliveryQueue(
        client,
        credentials,
        max_attempts=settings.delivery_max_attempts,
        spacing_seconds=settings.delivery_spacing_seconds,
        max_length=settings.message_max_length,
    )


async def main() -> None:
    """Main function to run the bot."""
    setup_logging()
    logger.info("Starting Kickdex bot...")

    try:
        await init_db()
        logger.info("Database connection established")
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        sys.exit(1)

    engine = create_engine()
    await engine.ensure_catalog()

    client = create_kick_client()
    credentials = create_credentials(client)
    credentials.start_periodic_refresh(settings.token_refresh_interval_seconds)

    delivery = create_delivery(client, credentials)

    async def on_message(message: ChatMessage) -> None:
        reply = await handle_chat_command(engine, message.username, message.content)
        if reply:
            logger.info("Bot reply", text=reply)
            delivery.send(reply)

    connector = None
    chatroom_id, channel_id = await credentials.get_chat_routing()
    if chatroom_id is None:
        logger.warning(
            "Kick connector not started: missing chatroom id. "
            "Set it with `kickdex-admin set-chatroom`."
        )
    else:
        connector = KickChatConnector(
            settings.kick_pusher_url,
            chatroom_id,
            on_message,
            channel_id=channel_id,
            backoff=replace(RECONNECT_BACKOFF, cap=settings.reconnect_max_delay_seconds),
        )
        connector.start()
        logger.info("Kick connector started", chatroom_id=chatroom_id)

    def broadcast(spawn) -> None:
        text = spawn_announcement(spawn)
        logger.info("Spawn announced", text=text)
        delivery.send(text)

    scheduler = SpawnScheduler(
        engine,
        broadcast,
        min_interval_seconds=settings.spawn_min_interval_seconds,
        max_interval_seconds=settings.spawn_max_interval_seconds,
    )
    scheduler.start()

    try:
        await asyncio.Event().wait()
    finally:
        # Cleanup
        scheduler.stop()
        await scheduler.join()
        if connector is not None:
            connector.stop()
            await connector.join()
        await delivery.stop()
        await credentials.stop_periodic_refresh()
        await client.aclose()
        await close_db()
        logger.info("Bot stopped")


def run() -> None:
    """Entry point for the application."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
