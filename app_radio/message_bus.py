"""Process-wide channel tree, for code that does not carry its own AppRadio."""

from typing import Any, Optional

from .radio import AppRadio
from .schemas import ROOT_CHANNEL, Listener

_radio_instance: Optional[AppRadio] = None


def get_radio() -> AppRadio:
    """Returns the shared AppRadio, creating it on first use."""
    global _radio_instance
    if _radio_instance is None:
        _radio_instance = AppRadio()
    return _radio_instance


def reset_radio() -> None:
    """Drops the shared AppRadio; the next get_radio() starts from an empty tree."""
    global _radio_instance
    _radio_instance = None


def broadcast(message: Any) -> None:
    get_radio().broadcast(message)


def stream(message: Any) -> None:
    get_radio().stream(message)


def subscribe(channel_path: str, handler: Listener) -> None:
    get_radio().subscribe(channel_path, handler)


def unsubscribe(channel_path: str, handler: Listener) -> None:
    get_radio().unsubscribe(channel_path, handler)


def listen_once(channel_path: str, handler: Listener) -> None:
    get_radio().listen_once(channel_path, handler)


def is_streaming(channel_path: str) -> bool:
    return get_radio().is_streaming(channel_path)


def silence(channel_path: str = ROOT_CHANNEL) -> None:
    get_radio().silence(channel_path)
