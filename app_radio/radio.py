# app_radio/radio.py
import asyncio
import inspect
import logging
from collections import deque
from typing import Any, Deque, List, Optional, Set, Tuple

from . import metrics
from .channel_tree import (
    ChannelNode,
    iter_subtree,
    join_channel,
    normalize_channel,
    resolve_channel,
    spread_on_subtree,
    walk_segments,
)
from .config import RadioConfig, get_config
from .schemas import ROOT_CHANNEL, Listener, Message, to_message


class NoEventLoopError(RuntimeError):
    """Raised when a delivery has to be scheduled but no event loop is available."""


class AppRadio:
    """
    Hierarchical in-process publish/subscribe over a tree of channels.

    Every listener call is deferred to a later turn of the event loop, so
    publishers and subscribers always resume before any listener runs.
    """

    def __init__(
        self,
        config: Optional[RadioConfig] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.config = config or get_config()
        self.listeners_root = ChannelNode()
        self._loop = loop
        self._tasks: Set[asyncio.Future] = set()
        self._delayed: Deque[Tuple[Any, tuple]] = deque()
        logging.debug("[AppRadio] Initialized.")

    # --- PUBLISHING ---

    def broadcast(self, message: Any) -> None:
        """Deliver a message once to the listeners currently on its channel."""
        message = to_message(message)
        node = self._node(message.channel)
        metrics.MESSAGES_TOTAL.labels(kind="broadcast").inc()
        self._deliver(node.listeners, message, kind="broadcast")

    def stream(self, message: Any) -> None:
        """Deliver a message and keep it as the channel's value for future subscribers."""
        message = to_message(message)
        node = self._node(message.channel)
        # Cached before delivery so a racing subscriber still sees it on replay.
        node.last_message = message
        metrics.MESSAGES_TOTAL.labels(kind="stream").inc()
        self._deliver(node.listeners, message, kind="stream")

    # --- SUBSCRIPTIONS ---

    def subscribe(self, channel_path: str, handler: Listener) -> None:
        """
        Register handler on a channel.

        If the channel is streaming when the deferred check runs, handler is
        called once with the cached payload.
        """
        node = self._node(channel_path)

        def replay() -> None:
            if node.last_message is not None:
                metrics.DELIVERIES_TOTAL.labels(kind="replay").inc()
                self._invoke(handler, node.last_message.payload)

        self._schedule(replay)

        if not any(_same_listener(listener, handler) for listener in node.listeners):
            node.listeners.append(handler)
            metrics.SUBSCRIPTIONS_TOTAL.labels(action="subscribe").inc()
            logging.debug(f"[AppRadio] Subscribed {_describe(handler)} to '{channel_path}'")

    def unsubscribe(self, channel_path: str, handler: Listener) -> None:
        """Remove handler from a channel; unknown handlers are ignored."""
        listeners = self._node(channel_path).listeners
        for index, listener in enumerate(listeners):
            if _same_listener(listener, handler):
                del listeners[index]
                metrics.SUBSCRIPTIONS_TOTAL.labels(action="unsubscribe").inc()
                logging.debug(f"[AppRadio] Unsubscribed {_describe(handler)} from '{channel_path}'")
                return

    def listen_once(self, channel_path: str, handler: Listener) -> None:
        """Call handler with the next payload on a channel (or the cached one), then stop listening."""
        channel_path = normalize_channel(channel_path)
        fired = False

        def listener(payload: Any) -> Any:
            nonlocal fired
            # Deliveries scheduled before the unsubscribe below are dropped.
            if fired:
                return None
            fired = True
            try:
                return handler(payload)
            finally:
                self.unsubscribe(channel_path, listener)

        self.subscribe(channel_path, listener)

    # --- STREAMING STATE ---

    def is_streaming(self, channel_path: str) -> bool:
        return self._node(channel_path).is_streaming

    def silence(self, channel_path: str = ROOT_CHANNEL) -> None:
        """Forget the streamed message of a channel and of all its sub-channels."""

        def clear(node: ChannelNode) -> None:
            node.last_message = None

        spread_on_subtree(self._node(channel_path), clear)
        metrics.SILENCE_TOTAL.inc()
        logging.debug(f"[AppRadio] Silenced '{channel_path}' and its sub-channels")

    # --- INTROSPECTION ---

    def listener_count(self, channel_path: str) -> int:
        return len(self._node(channel_path).listeners)

    def streaming_channels(self, channel_path: str = ROOT_CHANNEL) -> List[str]:
        """Paths at or below channel_path that currently hold a streamed message."""
        prefix = join_channel(walk_segments(channel_path, self.config.collapse_empty_segments))
        return [path for path, node in iter_subtree(self._node(channel_path), prefix) if node.is_streaming]

    # --- INTERNALS ---

    def _node(self, channel_path: str) -> ChannelNode:
        return resolve_channel(
            self.listeners_root,
            channel_path,
            collapse_empty_segments=self.config.collapse_empty_segments,
        )

    def _deliver(self, listeners: List[Listener], message: Message, kind: str) -> None:
        for listener in list(listeners):
            metrics.DELIVERIES_TOTAL.labels(kind=kind).inc()
            if self.config.log_deliveries:
                logging.debug(f"[AppRadio] Scheduling {kind} on '{message.channel}' for {_describe(listener)}")
            self._schedule(self._invoke, listener, message.payload)

    def _invoke(self, listener: Listener, payload: Any) -> None:
        result = listener(payload)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    def _schedule(self, callback, *args) -> None:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as e:
                logging.error("[AppRadio] Cannot schedule a delivery: no event loop is running.")
                raise NoEventLoopError(
                    "AppRadio delivers asynchronously; call it from a running event loop "
                    "or bind one with AppRadio(loop=...)."
                ) from e

        delay = self.config.delivery_delay_seconds
        if delay > 0:
            # Timers with equal deadlines may fire in any order; the queue keeps deliveries FIFO.
            self._delayed.append((callback, args))
            loop.call_later(delay, self._run_delayed)
        else:
            loop.call_soon(callback, *args)

    def _run_delayed(self) -> None:
        callback, args = self._delayed.popleft()
        callback(*args)


def _same_listener(registered: Listener, handler: Listener) -> bool:
    """Listeners match by identity; bound methods match when object and function are the same."""
    if registered is handler:
        return True
    if inspect.ismethod(registered) and inspect.ismethod(handler):
        return registered.__self__ is handler.__self__ and registered.__func__ is handler.__func__
    if inspect.isbuiltin(registered) and inspect.isbuiltin(handler):
        return registered.__self__ is handler.__self__ and registered.__name__ == handler.__name__
    return False


def _describe(handler: Listener) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
