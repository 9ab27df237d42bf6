"""Kickdex: a chat-driven Pokemon catching game for Kick."""

__version__ = "0.1.0"
