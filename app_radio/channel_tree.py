# app_radio/channel_tree.py
"""
The channel tree: one node per distinct path reached so far.

Nodes are created lazily by resolve_channel and are never removed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .schemas import ROOT_CHANNEL, Listener, Message


@dataclass(eq=False)
class ChannelNode:
    """A single channel with its listeners and last streamed message."""

    children: Dict[str, "ChannelNode"] = field(default_factory=dict)
    listeners: List[Listener] = field(default_factory=list)
    last_message: Optional[Message] = None

    @property
    def is_streaming(self) -> bool:
        return self.last_message is not None


def normalize_channel(path: str) -> str:
    """Channel names are case-insensitive."""
    return path.lower()


def split_channel(path: str) -> List[str]:
    """Splits a path into segments, dropping the empty token of a leading slash."""
    path = normalize_channel(path)
    segments = path.split("/")
    if path.startswith("/"):
        segments.pop(0)
    return segments


def walk_segments(path: str, collapse_empty_segments: bool = False) -> List[str]:
    """
    The segments a resolution of path actually descends through.

    An empty segment ends the walk, so "/" and "" walk nothing and "a//b"
    walks only "a". With collapse_empty_segments the empty segments are
    skipped instead and "a//b" walks "a" then "b".
    """
    walked = []
    for segment in split_channel(path):
        if not segment:
            if collapse_empty_segments:
                continue
            break
        walked.append(segment)
    return walked


def join_channel(segments: List[str]) -> str:
    return ROOT_CHANNEL + "/".join(segments)


def resolve_channel(
    root: ChannelNode, path: str, collapse_empty_segments: bool = False
) -> ChannelNode:
    """Returns the node at the bottom of a channel path, creating every missing node."""
    node = root
    for segment in walk_segments(path, collapse_empty_segments):
        child = node.children.get(segment)
        if child is None:
            child = ChannelNode()
            node.children[segment] = child
            logging.debug(f"[ChannelTree] Created node '{segment}'")
        node = child
    return node


def spread_on_subtree(node: ChannelNode, on_node: Callable[[ChannelNode], None]) -> None:
    """Applies on_node to node and to every one of its descendants."""
    pending = [node]
    while pending:
        current = pending.pop()
        on_node(current)
        pending.extend(current.children.values())


def iter_subtree(node: ChannelNode, prefix: str = ROOT_CHANNEL) -> Iterator[Tuple[str, ChannelNode]]:
    """Yields (path, node) for node and its descendants, parents before children."""
    pending = [(prefix, node)]
    while pending:
        path, current = pending.pop()
        yield path, current
        for segment, child in sorted(current.children.items(), reverse=True):
            pending.append((f"{path.rstrip('/')}/{segment}", child))
