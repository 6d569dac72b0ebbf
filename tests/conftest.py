"""Shared pytest fixtures for the test suite."""
import pytest

from epggrab.database import close_db, get_session_factory, init_db
from epggrab.services.channel_registry import ChannelRegistry
from epggrab.services.grab_types import GrabStats
from epggrab.services.guide_store import GuideStore
from epggrab.services.xmltv_parser_service import XmltvReconciler

# 2023-01-15 00:00:00 UTC
NOW = 1673740800


@pytest.fixture
def session(tmp_path):
    """Session on a fresh SQLite database."""
    init_db(str(tmp_path / "guide.db"))
    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()
        close_db()


@pytest.fixture
def channels(session):
    return ChannelRegistry(session)


@pytest.fixture
def store(session):
    return GuideStore(session)


@pytest.fixture
def reconciler(channels, store):
    return XmltvReconciler(channels, store, clock=lambda: NOW)


@pytest.fixture
def stats():
    return GrabStats()


@pytest.fixture
def linked_channel(channels, session):
    """Guide channel 'bbc1.uk' linked to tunable channel 'BBC One'."""
    tunable = channels.add_tunable("BBC One", 1)
    guide, _ = channels.find("bbc1.uk", create=True)
    channels.link(guide, tunable)
    session.commit()
    return tunable
