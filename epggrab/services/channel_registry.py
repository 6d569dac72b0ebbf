"""
Channel registry

Maps XMLTV guide-channel ids to the tunable channels broadcasts are stored
against, and tells interested parties when a guide channel changed.
"""
import logging
from collections.abc import Callable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from epggrab.models import GuideChannel, TunableChannel


logger = logging.getLogger(__name__)

ChannelListener = Callable[[GuideChannel], None]


class ChannelRegistry:
    """Guide channels of the xmltv modules, shared by all of them."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self._listeners: list[ChannelListener] = []

    def add_listener(self, listener: ChannelListener) -> None:
        """Register a callback run whenever a guide channel is updated."""
        self._listeners.append(listener)

    def add_tunable(self, name: str, number: int | None = None) -> TunableChannel:
        """
        Add a tunable channel.

        Unlinked guide channels whose display name matches are linked to it.
        """
        channel = TunableChannel(name=name, number=number)
        self.session.add(channel)
        self.session.flush()
        logger.debug("Added tunable channel %s", name)

        unlinked = self.session.scalars(
            select(GuideChannel).where(
                GuideChannel.channel_id.is_(None),
                func.lower(GuideChannel.display_name) == name.lower(),
            )
        ).all()
        for guide_channel in unlinked:
            self.link(guide_channel, channel)
        return channel

    def find(self, xmltv_id: str, create: bool = False) -> tuple[GuideChannel | None, bool]:
        """
        Look up a guide channel by its XMLTV id.

        Returns:
            Tuple of (guide channel or None, whether it was created)
        """
        channel = self.session.get(GuideChannel, xmltv_id)
        if channel is not None or not create:
            return channel, False

        channel = GuideChannel(xmltv_id=xmltv_id)
        self.session.add(channel)
        self.session.flush()
        logger.debug("Created guide channel %s", xmltv_id)
        return channel, True

    def set_name(self, channel: GuideChannel, name: str) -> bool:
        if channel.display_name == name:
            return False
        channel.display_name = name
        return True

    def set_icon(self, channel: GuideChannel, icon_url: str) -> bool:
        if channel.icon_url == icon_url:
            return False
        channel.icon_url = icon_url
        return True

    def link(self, channel: GuideChannel, tunable: TunableChannel | None) -> bool:
        """Point a guide channel at a tunable channel (None unlinks it)."""
        if channel.channel is tunable:
            return False
        channel.channel = tunable
        logger.info(
            "Guide channel %s %s",
            channel.xmltv_id,
            f"linked to {tunable.name}" if tunable is not None else "unlinked",
        )
        return True

    def _match_tunable(self, name: str) -> TunableChannel | None:
        return self.session.scalars(
            select(TunableChannel)
            .where(func.lower(TunableChannel.name) == name.lower())
            .order_by(TunableChannel.id)
        ).first()

    def updated(self, channel: GuideChannel) -> None:
        """
        Record that a guide channel's metadata changed.

        An unlinked channel is linked to the tunable channel carrying the same
        name, if there is one, before listeners are notified.
        """
        if channel.channel is None and channel.display_name:
            tunable = self._match_tunable(channel.display_name)
            if tunable is not None:
                self.link(channel, tunable)

        for listener in self._listeners:
            listener(channel)
