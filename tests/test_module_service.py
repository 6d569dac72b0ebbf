"""Tests for grabber module registration and grab passes."""
import logging

import pytest
from sqlalchemy import func, select

from epggrab.config import CustomSettings
from epggrab.database import close_db, get_session_factory, session_scope
from epggrab.models import Broadcast, GuideChannel
from epggrab.services.grab_types import ModuleCapability
from epggrab.services.guide_store import GuideStore
from epggrab.services.module_service import (
    GrabberError,
    ModuleRegistry,
    ingest,
    run_grab,
    run_grab_cycle,
    xmltv_init,
)

# 2023-01-15 00:00:00 UTC
NOW = 1673740800

DOCUMENT = b"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE tv SYSTEM "xmltv.dtd">
<tv generator-info-name="test">
  <channel id="bbc1.uk">
    <display-name>BBC One</display-name>
  </channel>
  <programme channel="bbc1.uk" start="20230115200000 +0000" stop="20230115210000 +0000">
    <title>News</title>
    <desc>Headlines</desc>
  </programme>
</tv>
"""


class FakeRunner:
    """Stands in for the subprocess primitive."""

    def __init__(self, outputs):
        self.outputs = outputs
        self.calls = []

    def __call__(self, command, timeout=None):
        self.calls.append((command, timeout))
        return self.outputs.get(command, b"")


@pytest.fixture
def grab_settings(tmp_path):
    return CustomSettings(
        database_path=str(tmp_path / "guide.db"),
        find_grabbers_command="/usr/bin/tv_find_grabbers",
        socket_dir=str(tmp_path / "sock"),
        grab_timeout_sec=30,
    )


@pytest.fixture
def runner():
    return FakeRunner({
        "/usr/bin/tv_find_grabbers": b"/usr/bin/tv_grab_uk|United Kingdom\n/usr/bin/tv_grab_fi\n",
        "/usr/bin/tv_grab_uk": DOCUMENT,
    })


@pytest.fixture
def modules(store, channels, grab_settings, runner):
    modules = ModuleRegistry()
    xmltv_init(modules, store, channels, settings=grab_settings, runner=runner, clock=lambda: NOW)
    return modules


def test_external_module_registered_first(modules, grab_settings):
    registered = list(modules)
    assert registered[0].id == "xmltv"
    assert registered[0].capabilities == ModuleCapability.EXTERNAL
    assert registered[0].path == grab_settings.socket_path
    assert registered[0].grab is None


def test_discovered_modules_in_order(modules, channels):
    simple = modules.simple_modules()
    assert [module.id for module in simple] == ["/usr/bin/tv_grab_uk", "/usr/bin/tv_grab_fi"]
    assert [module.name for module in simple] == ["XMLTV: United Kingdom", "XMLTV: /usr/bin/tv_grab_fi"]
    assert all(module.channels is channels for module in modules)
    assert all(module.parse == modules.get("xmltv").parse for module in simple)


def test_discovery_failure_keeps_external_module(store, channels, grab_settings):
    modules = ModuleRegistry()
    xmltv_init(modules, store, channels, settings=grab_settings, runner=FakeRunner({}))
    assert [module.id for module in modules] == ["xmltv"]


def test_run_grab_ingests_document(modules, channels, session, runner):
    channels.add_tunable("BBC One")
    stats = run_grab(modules.get("/usr/bin/tv_grab_uk"))

    assert ("/usr/bin/tv_grab_uk", 30) in runner.calls
    assert stats.channels.created == 1
    assert stats.episodes.created == 1
    assert stats.broadcasts.created == 1
    assert session.scalar(select(func.count()).select_from(Broadcast)) == 1


def test_run_grab_twice_reports_no_modifications(modules, channels):
    channels.add_tunable("BBC One")
    module = modules.get("/usr/bin/tv_grab_uk")
    run_grab(module)

    stats = run_grab(module)
    assert stats.to_dict() == {
        "channels": {"total": 1, "created": 0, "modified": 0},
        "episodes": {"total": 1, "created": 0, "modified": 0},
        "broadcasts": {"total": 1, "created": 0, "modified": 0},
    }


def test_run_grab_without_output(modules):
    stats = run_grab(modules.get("/usr/bin/tv_grab_fi"))
    assert stats.channels.total == 0


def test_external_module_cannot_grab(modules):
    with pytest.raises(GrabberError):
        run_grab(modules.get("xmltv"))


def test_ingest_pushed_document(modules):
    stats = ingest(modules.get("xmltv"), DOCUMENT)
    assert stats.channels.created == 1


def test_ingest_malformed_document(modules):
    stats = ingest(modules.get("xmltv"), b"<tv><channel id='x'>")
    assert stats.channels.total == 0


def test_duplicate_registration_ignored(modules):
    assert modules.register(modules.get("xmltv")) is False
    assert len(modules) == 3


def test_ingest_malformed_document_closes_section(modules, caplog):
    caplog.set_level(logging.INFO)
    ingest(modules.get("xmltv"), b"<tv><channel id='x'>")
    assert "Completed: xmltv parse" in caplog.text


def test_store_on_another_session_rejected(channels, grab_settings, runner):
    other = get_session_factory()()
    try:
        with pytest.raises(ValueError):
            xmltv_init(ModuleRegistry(), GuideStore(other), channels, settings=grab_settings, runner=runner)
    finally:
        other.close()


def test_grab_cycle_grabs_every_simple_module(grab_settings, runner):
    try:
        results = run_grab_cycle(settings=grab_settings, runner=runner, clock=lambda: NOW)

        assert list(results) == ["/usr/bin/tv_grab_uk", "/usr/bin/tv_grab_fi"]
        assert results["/usr/bin/tv_grab_uk"].channels.created == 1
        assert results["/usr/bin/tv_grab_fi"].channels.total == 0
        with session_scope() as session:
            assert session.scalar(select(func.count()).select_from(GuideChannel)) == 1
    finally:
        close_db()
