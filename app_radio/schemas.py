# app_radio/schemas.py

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

# --- CHANNELS ---

ROOT_CHANNEL = "/"

# A listener receives the payload of every message delivered on its channel.
Listener = Callable[[Any], Any]


# --- MESSAGES ---


class Message(BaseModel):
    """A payload addressed to one channel of the tree."""

    model_config = ConfigDict(frozen=True)

    channel: str = ROOT_CHANNEL
    payload: Any = None


def to_message(message: Any) -> Message:
    """
    Normalizes whatever was handed to broadcast/stream into a Message.

    Mappings carrying a "channel" key are treated as messages; every other
    value is a bare payload for the root channel.
    """
    if isinstance(message, Message):
        return message
    if isinstance(message, Mapping) and "channel" in message:
        return Message.model_validate(dict(message))
    return Message(channel=ROOT_CHANNEL, payload=message)
