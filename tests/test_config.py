"""Tests for settings validation."""
import pytest
from pydantic import ValidationError

from epggrab.config import CustomSettings


def test_defaults(tmp_path):
    settings = CustomSettings(database_path=str(tmp_path / "guide.db"))
    assert settings.find_grabbers_command == "/usr/bin/tv_find_grabbers"
    assert settings.grab_timeout_sec == 0
    assert settings.socket_path.endswith("xmltv.sock")


def test_environment_prefix(tmp_path, monkeypatch):
    monkeypatch.setenv("EPGGRAB_FIND_GRABBERS_COMMAND", "/opt/xmltv/tv_find_grabbers")
    monkeypatch.setenv("EPGGRAB_LOG_LEVEL", "debug")
    settings = CustomSettings(database_path=str(tmp_path / "guide.db"))
    assert settings.find_grabbers_command == "/opt/xmltv/tv_find_grabbers"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "field, value",
    [
        ("grab_timeout_sec", -1),
        ("log_level", "LOUD"),
        ("find_grabbers_command", "  "),
    ],
)
def test_invalid_values_rejected(tmp_path, field, value):
    with pytest.raises(ValidationError):
        CustomSettings(database_path=str(tmp_path / "guide.db"), **{field: value})
