"""
Guide store operations for episodes and broadcasts

Every lookup can optionally create the record, and every setter reports
whether the stored value actually changed so callers can count modifications.
"""
import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from epggrab.models import Broadcast, Episode, TunableChannel


logger = logging.getLogger(__name__)


def _update_field(record: Any, attribute: str, value: Any) -> bool:
    """Assign value to record.attribute when it differs, return whether it did."""
    if getattr(record, attribute) == value:
        return False
    setattr(record, attribute, value)
    return True


class GuideStore:
    """Find-or-create and update primitives over one database session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # Episodes

    def find_episode_by_uri(self, uri: str, create: bool = False) -> tuple[Episode | None, bool]:
        """
        Look up an episode by its content digest.

        Returns:
            Tuple of (episode or None, whether it was created)
        """
        episode = self.session.scalars(
            select(Episode).where(Episode.uri == uri)
        ).one_or_none()
        if episode is not None or not create:
            return episode, False

        episode = Episode(
            uri=uri,
            genres=[],
            season_number=0,
            season_count=0,
            episode_number=0,
            episode_count=0,
            part_number=0,
            part_count=0,
        )
        self.session.add(episode)
        self.session.flush()
        logger.debug("Created episode %s", uri)
        return episode, True

    def set_episode_title(self, episode: Episode, title: str) -> bool:
        return _update_field(episode, "title", title)

    def set_episode_description(self, episode: Episode, description: str) -> bool:
        return _update_field(episode, "description", description)

    def set_episode_genres(self, episode: Episode, genres: Sequence[str]) -> bool:
        genres = [genre for genre in genres if genre]
        if list(episode.genres or []) == genres:
            return False
        episode.genres = genres
        return True

    def set_episode_season(self, episode: Episode, number: int, count: int) -> bool:
        changed = _update_field(episode, "season_number", number)
        changed |= _update_field(episode, "season_count", count)
        return changed

    def set_episode_number(self, episode: Episode, number: int) -> bool:
        return _update_field(episode, "episode_number", number)

    def set_episode_count(self, episode: Episode, count: int) -> bool:
        return _update_field(episode, "episode_count", count)

    def set_episode_part(self, episode: Episode, number: int, count: int) -> bool:
        changed = _update_field(episode, "part_number", number)
        changed |= _update_field(episode, "part_count", count)
        return changed

    def set_episode_onscreen(self, episode: Episode, onscreen: str) -> bool:
        return _update_field(episode, "onscreen", onscreen)

    # Broadcasts

    def find_broadcast_by_time(
        self,
        channel: TunableChannel,
        start: int,
        stop: int,
        create: bool = False,
    ) -> tuple[Broadcast | None, bool]:
        """
        Look up the broadcast occupying [start, stop) on a channel.

        Returns:
            Tuple of (broadcast or None, whether it was created)
        """
        broadcast = self.session.scalars(
            select(Broadcast).where(
                Broadcast.channel_id == channel.id,
                Broadcast.start == start,
                Broadcast.stop == stop,
            )
        ).one_or_none()
        if broadcast is not None or not create:
            return broadcast, False

        broadcast = Broadcast(channel=channel, start=start, stop=stop)
        self.session.add(broadcast)
        self.session.flush()
        logger.debug("Created broadcast on %s [%s, %s)", channel.name, start, stop)
        return broadcast, True

    def set_broadcast_episode(self, broadcast: Broadcast, episode: Episode) -> bool:
        if broadcast.episode is episode:
            return False
        broadcast.episode = episode
        return True
