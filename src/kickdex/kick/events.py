"""Parsing of Pusher frames received from the Kick chat socket.

The Kick event envelope is not documented, so field extraction is
best-effort: several field names are tried for the sender and the text, and
anything that does not yield both is dropped.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

CHAT_MESSAGE_MARKER = "chatmessage"

PING_EVENT = "pusher:ping"
PONG_EVENT = "pusher:pong"
SUBSCRIBE_EVENT = "pusher:subscribe"


@dataclass(frozen=True)
class ChatMessage:
    """A chat line from the room."""

    username: str
    content: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def subscribe_frame(channel: str) -> dict[str, Any]:
    return {"event": SUBSCRIBE_EVENT, "data": {"channel": channel}}


def pong_frame() -> dict[str, Any]:
    return {"event": PONG_EVENT, "data": {}}


def subscription_channels(chatroom_id: int, channel_id: int | None = None) -> list[str]:
    """Pusher channels to subscribe to for a chat room."""
    channels = [f"chatrooms.{chatroom_id}.v2"]
    if channel_id:
        channels.append(f"channel.{channel_id}")
    return channels


def _loads(raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError:
            return raw
    return raw


def parse_envelope(raw: Any) -> tuple[str, Any] | None:
    """Split a frame into its event name and decoded data."""
    frame = _loads(raw)
    if not isinstance(frame, dict):
        return None
    event = frame.get("event")
    if not event or not isinstance(event, str):
        return None
    return event, _loads(frame.get("data"))


def event_type(event: str) -> str:
    """Short type of an event such as ``App\\Events\\ChatMessageEvent``."""
    parts = event.split("\\")
    for index in (2, 1, 0):
        if len(parts) > index and parts[index]:
            return parts[index]
    return event


def is_chat_message_event(event: str) -> bool:
    return CHAT_MESSAGE_MARKER in event_type(event).lower()


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""


def extract_content(payload: dict[str, Any]) -> str:
    message = payload.get("message")
    candidates = [
        payload.get("content"),
        message,
        payload.get("text"),
        message.get("content") if isinstance(message, dict) else None,
        payload.get("body"),
    ]
    for candidate in candidates:
        text = _text(candidate)
        if text:
            return text
    return ""


def extract_username(payload: dict[str, Any]) -> str:
    sender = payload.get("sender")
    user = payload.get("user")
    candidates = [
        sender.get("username") if isinstance(sender, dict) else None,
        user,
        user.get("username") if isinstance(user, dict) else None,
        payload.get("displayName"),
        payload.get("senderUsername"),
    ]
    for candidate in candidates:
        name = _text(candidate)
        if name:
            return name
    return ""


def chat_message_from_envelope(event: str, payload: Any) -> ChatMessage | None:
    """Build a chat message from an already split frame."""
    if not is_chat_message_event(event) or not isinstance(payload, dict):
        return None

    content = extract_content(payload)
    username = extract_username(payload)
    if not content or not username:
        return None
    return ChatMessage(username=username, content=content, raw=payload)


def parse_chat_frame(raw: Any) -> ChatMessage | None:
    """Parse a socket frame into a chat message, or ``None`` to ignore it."""
    envelope = parse_envelope(raw)
    if envelope is None:
        return None
    return chat_message_from_envelope(*envelope)
