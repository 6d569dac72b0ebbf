"""
Date and Time utilities

This module decodes XMLTV timestamps and provides the dispatch clock used to
discard programmes that have already finished.
"""
from datetime import datetime, timezone
import logging
import re
import time

logger = logging.getLogger(__name__)

# YYYYMMDDHHMMSS followed by an optional signed HHMM offset
_XMLTV_TIME_RE = re.compile(
    r"^\s*(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(?:\s*([+-]?\d+))?"
)

EPOCH_ZERO = 0


def dispatch_clock() -> int:
    """Current reference instant in seconds since the epoch."""
    return int(time.time())


def _offset_to_minutes(offset: int) -> int:
    """
    Convert an HHMM offset to minutes.

    Truncates toward zero for negative offsets, so -0530 is -330 minutes.
    """
    sign = -1 if offset < 0 else 1
    hours, minutes = divmod(abs(offset), 100)
    return sign * (hours * 60 + minutes)


def decode_xmltv_time(time_str: str) -> int:
    """
    Decode an XMLTV timestamp into seconds since the epoch

    Args:
        time_str: XMLTV time like '20080715003000' or '20080715003000 -0600'

    Returns:
        Absolute instant in seconds. Without an offset the fields are read as
        local civil time; with one they are read as UTC and the offset is
        subtracted. Anything unparsable decodes to EPOCH_ZERO.
    """
    match = _XMLTV_TIME_RE.match(time_str or "")
    if match is None:
        logger.debug("Unparsable XMLTV time: %r", time_str)
        return EPOCH_ZERO

    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    offset = match.group(7)

    try:
        if offset is None:
            return int(datetime(year, month, day, hour, minute, second).timestamp())

        utc_time = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
        return int(utc_time.timestamp()) - _offset_to_minutes(int(offset)) * 60
    except (ValueError, OverflowError, OSError):
        logger.debug("Invalid calendar fields in XMLTV time: %r", time_str)
        return EPOCH_ZERO
