"""
XMLTV reconciliation

Walks an XMLTV tag tree and merges its channels and programmes into the
guide. Malformed entries are skipped one at a time; nothing here aborts a
pass.
"""
from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from epggrab.models import Episode, TunableChannel
from epggrab.services.channel_registry import ChannelRegistry
from epggrab.services.grab_types import GrabStats
from epggrab.services.guide_store import GuideStore
from epggrab.services.tag_tree import TagNode
from epggrab.utils.episode_numbering import EpisodeNumber, parse_xmltv_ns
from epggrab.utils.timezone import EPOCH_ZERO, decode_xmltv_time, dispatch_clock

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProgrammeInfo:
    """Content extracted from the child tags of a <programme>."""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    numbering: EpisodeNumber = field(default_factory=EpisodeNumber)
    onscreen: Optional[str] = None


def episode_uri(title: str, description: Optional[str]) -> str:
    """Digest identifying an episode: the description if there is one, else the title."""
    return hashlib.md5((description or title).encode("utf-8")).hexdigest()


def _programme_info(tags: TagNode) -> ProgrammeInfo:
    """Extract title, description, category and episode numbering."""
    info = ProgrammeInfo(
        title=tags.child_cdata("title"),
        description=tags.child_cdata("desc"),
        category=tags.child_cdata("category"),
    )

    for node in tags.children():
        if node.name != "episode-num":
            continue
        system = node.attribute("system")
        cdata = node.cdata()
        if system is None or cdata is None:
            continue

        if system == "onscreen":
            info.onscreen = cdata
        elif system == "xmltv_ns":
            info.numbering = parse_xmltv_ns(cdata)

    return info


class XmltvReconciler:
    """Merges XMLTV documents into the guide store."""

    def __init__(
        self,
        channels: ChannelRegistry,
        store: GuideStore,
        clock: Callable[[], int] = dispatch_clock,
    ) -> None:
        self.channels = channels
        self.store = store
        self.clock = clock

    def parse_document(self, document: TagNode, stats: GrabStats) -> bool:
        """Entry point for a loaded document; needs a <tv> root."""
        tv = document.child("tv")
        if tv is None:
            logger.warning("Document has no <tv> root, ignoring")
            return False
        return self.parse_tv(tv, stats)

    def parse_tv(self, tv: TagNode, stats: GrabStats) -> bool:
        """Dispatch every <channel> and <programme>, return whether anything changed."""
        now = self.clock()
        changed = False

        for node in tv.children():
            if node.name == "channel":
                changed |= self.parse_channel(node, stats)
            elif node.name == "programme":
                changed |= self.parse_programme(node, stats, now)

        return changed

    def parse_channel(self, node: TagNode, stats: GrabStats) -> bool:
        xmltv_id = node.attribute("id")
        if not xmltv_id:
            logger.debug("Skipping channel with missing ID attribute")
            return False
        if next(node.children(), None) is None:
            logger.debug(f"Skipping channel {xmltv_id} without child tags")
            return False

        channel, changed = self.channels.find(xmltv_id, create=True)
        if channel is None:
            return False
        stats.channels.total += 1
        if changed:
            stats.channels.created += 1

        name = node.child_cdata("display-name")
        if name is not None:
            changed |= self.channels.set_name(channel, name)

        icon = node.child("icon")
        icon_url = icon.attribute("src") if icon is not None else None
        if icon_url:
            changed |= self.channels.set_icon(channel, icon_url)

        if changed:
            self.channels.updated(channel)
            stats.channels.modified += 1
        return changed

    def parse_programme(self, node: TagNode, stats: GrabStats, now: Optional[int] = None) -> bool:
        xmltv_id = node.attribute("channel")
        if not xmltv_id:
            return False

        guide_channel, _ = self.channels.find(xmltv_id)
        if guide_channel is None or guide_channel.channel is None:
            return False

        start_str = node.attribute("start")
        stop_str = node.attribute("stop")
        if start_str is None or stop_str is None:
            return False
        start = decode_xmltv_time(start_str)
        stop = decode_xmltv_time(stop_str)
        if start == EPOCH_ZERO or stop == EPOCH_ZERO:
            return False

        if now is None:
            now = self.clock()
        if stop <= start or stop < now:
            return False

        return self._parse_programme_tags(guide_channel.channel, node, start, stop, stats)

    def _parse_programme_tags(
        self,
        channel: TunableChannel,
        tags: TagNode,
        start: int,
        stop: int,
        stats: GrabStats,
    ) -> bool:
        info = _programme_info(tags)

        episode, changed = self.reconcile_episode(info, stats)
        if episode is None:
            return False

        return self.reconcile_broadcast(channel, start, stop, episode, stats) | changed

    def reconcile_episode(self, info: ProgrammeInfo, stats: GrabStats) -> tuple[Episode | None, bool]:
        """
        Find or create the episode for a programme and merge its fields.

        A programme without a title is ignored entirely.
        """
        if not info.title:
            return None, False

        episode, changed = self.store.find_episode_by_uri(
            episode_uri(info.title, info.description), create=True
        )
        if episode is None:
            return None, False
        stats.episodes.total += 1
        if changed:
            stats.episodes.created += 1

        numbering = info.numbering
        changed |= self.store.set_episode_title(episode, info.title)
        if info.description:
            changed |= self.store.set_episode_description(episode, info.description)
        if info.category:
            changed |= self.store.set_episode_genres(episode, [info.category])
        if numbering.season_number:
            changed |= self.store.set_episode_season(
                episode, numbering.season_number, numbering.season_count
            )
        if numbering.part_number:
            changed |= self.store.set_episode_part(
                episode, numbering.part_number, numbering.part_count
            )
        if numbering.episode_number:
            changed |= self.store.set_episode_number(episode, numbering.episode_number)
        if numbering.episode_count:
            changed |= self.store.set_episode_count(episode, numbering.episode_count)
        if info.onscreen:
            changed |= self.store.set_episode_onscreen(episode, info.onscreen)

        if changed:
            stats.episodes.modified += 1
        return episode, changed

    def reconcile_broadcast(
        self,
        channel: TunableChannel,
        start: int,
        stop: int,
        episode: Episode,
        stats: GrabStats,
    ) -> bool:
        """Find or create the broadcast for an interval and link it to the episode."""
        broadcast, changed = self.store.find_broadcast_by_time(channel, start, stop, create=True)
        if broadcast is None:
            return False
        stats.broadcasts.total += 1
        if changed:
            stats.broadcasts.created += 1

        changed |= self.store.set_broadcast_episode(broadcast, episode)
        if changed:
            stats.broadcasts.modified += 1
        return changed
