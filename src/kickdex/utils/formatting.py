"""Formatting utilities for chat text."""


def normalize_participant(username: str) -> str:
    """Get the participant id for a chat username.

    Args:
        username: Sender name as it appears in chat

    Returns:
        The stripped, lower-cased username
    """
    return str(username).strip().lower()


def truncate_message(text: str, max_length: int) -> str:
    """Cut a message down to the platform's maximum length.

    Args:
        text: Message text
        max_length: Maximum number of characters

    Returns:
        The message, shortened if needed
    """
    return str(text)[:max_length]
