"""Kick platform integration: chat socket, REST client, credentials, delivery."""

from kickdex.kick.client import KickClient, SendResult, SendStatus, TokenGrant
from kickdex.kick.connector import ConnectionState, KickChatConnector
from kickdex.kick.delivery import DeliveryQueue
from kickdex.kick.events import ChatMessage, parse_chat_frame
from kickdex.kick.tokens import CredentialManager

__all__ = [
    "KickClient",
    "SendResult",
    "SendStatus",
    "TokenGrant",
    "KickChatConnector",
    "ConnectionState",
    "DeliveryQueue",
    "ChatMessage",
    "parse_chat_frame",
    "CredentialManager",
]
