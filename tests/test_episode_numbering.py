"""Tests for xmltv_ns episode number decoding."""
import pytest

from epggrab.utils.episode_numbering import EpisodeNumber, parse_xmltv_ns


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.2.3", (2, 0, 3, 0, 4, 0)),
        ("0..", (1, 0, 0, 0, 0, 0)),
        ("", (0, 0, 0, 0, 0, 0)),
        ("0 . 12/13 . 0/3", (1, 0, 13, 14, 1, 4)),
        ("1.0.0/2", (2, 0, 1, 0, 1, 3)),
        (".5.", (0, 0, 6, 0, 0, 0)),
        ("2/4", (3, 5, 0, 0, 0, 0)),
        ("/3..", (0, 4, 0, 0, 0, 0)),
    ],
)
def test_parse_xmltv_ns(text, expected):
    result = parse_xmltv_ns(text)
    assert (
        result.season_number,
        result.season_count,
        result.episode_number,
        result.episode_count,
        result.part_number,
        result.part_count,
    ) == expected


def test_garbage_degrades_to_absent():
    assert parse_xmltv_ns("abc") == EpisodeNumber()


def test_extra_components_are_ignored():
    assert parse_xmltv_ns("0.1.2.3") == parse_xmltv_ns("0.1.2")
