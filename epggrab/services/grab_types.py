"""
Shared types used across the grab pipeline.
"""
from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from epggrab.services.channel_registry import ChannelRegistry
    from epggrab.services.tag_tree import TagNode


@dataclass(slots=True)
class EntityStats:
    """Counters for one kind of guide entity."""
    total: int = 0
    created: int = 0
    modified: int = 0


@dataclass(slots=True)
class GrabStats:
    """Per-pass counters, owned by whoever runs the pass."""
    channels: EntityStats = field(default_factory=EntityStats)
    episodes: EntityStats = field(default_factory=EntityStats)
    broadcasts: EntityStats = field(default_factory=EntityStats)

    def to_dict(self) -> dict:
        return {
            name: {
                "total": counters.total,
                "created": counters.created,
                "modified": counters.modified,
            }
            for name, counters in (
                ("channels", self.channels),
                ("episodes", self.episodes),
                ("broadcasts", self.broadcasts),
            )
        }


class ModuleCapability(enum.Flag):
    """What kind of grabber module this is."""
    NONE = 0
    # Receives documents pushed over a socket
    EXTERNAL = enum.auto()
    # Runs a grabber executable and reads its stdout
    SIMPLE = enum.auto()


@dataclass(frozen=True, slots=True)
class GrabberDescriptor:
    """One grabber reported by the discovery command."""
    id: str
    path: str
    name: str


GrabFunc = Callable[["GrabberModule"], bytes]
TransFunc = Callable[[bytes], "TagNode | None"]
ParseFunc = Callable[["TagNode", GrabStats], bool]


@dataclass(slots=True)
class GrabberModule:
    """A registered XMLTV grabber module."""
    id: str
    name: str
    path: str
    capabilities: ModuleCapability
    channels: ChannelRegistry
    trans: TransFunc
    parse: ParseFunc
    grab: GrabFunc | None = None

    @property
    def is_simple(self) -> bool:
        return ModuleCapability.SIMPLE in self.capabilities

    @property
    def is_external(self) -> bool:
        return ModuleCapability.EXTERNAL in self.capabilities


__all__ = [
    "EntityStats",
    "GrabStats",
    "ModuleCapability",
    "GrabberDescriptor",
    "GrabberModule",
]
