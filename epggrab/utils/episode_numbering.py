"""
xmltv_ns episode numbering

Three dot-separated components (season, episode, part), each optionally
written as 'X/Y'. Values are zero-indexed in the document and surface here
shifted by one, so 0 means "not given".
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EpisodeNumber:
    """Decoded xmltv_ns numbering, 0 meaning absent."""
    season_number: int = 0
    season_count: int = 0
    episode_number: int = 0
    episode_count: int = 0
    part_number: int = 0
    part_count: int = 0


def _accumulate(value: int, char: str) -> int:
    if "0" <= char <= "9":
        return max(value, 0) * 10 + ord(char) - ord("0")
    return value


def _parse_component(text: str, pos: int) -> tuple[int, int, int]:
    """Parse one 'X/Y' component starting at pos, return (x, y, next_pos)."""
    numerator = denominator = -1
    end = len(text)

    while pos < end and text[pos] not in "./":
        numerator = _accumulate(numerator, text[pos])
        pos += 1

    if pos < end and text[pos] == "/":
        pos += 1
        while pos < end and text[pos] != ".":
            denominator = _accumulate(denominator, text[pos])
            pos += 1

    # Consume the separator
    if pos < end:
        pos += 1

    return numerator + 1, denominator + 1, pos


def parse_xmltv_ns(text: str) -> EpisodeNumber:
    """
    Decode an xmltv_ns episode number

    Malformed input never raises; whatever could not be read stays absent.

    Examples:
        '1.2.3'           -> season 2, episode 3, part 4
        '0 . 12/13 . 0/3' -> season 1, episode 13 of 14, part 1 of 4
    """
    season_number, season_count, pos = _parse_component(text, 0)
    episode_number, episode_count, pos = _parse_component(text, pos)
    part_number, part_count, _ = _parse_component(text, pos)

    return EpisodeNumber(
        season_number=season_number,
        season_count=season_count,
        episode_number=episode_number,
        episode_count=episode_count,
        part_number=part_number,
        part_count=part_count,
    )
