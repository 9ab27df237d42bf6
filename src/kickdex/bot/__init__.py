"""Chat bot layer."""

from kickdex.bot.commands import handle_chat_command, spawn_announcement

__all__ = ["handle_chat_command", "spawn_announcement"]
