"""
Grabber discovery

Runs the XMLTV discovery command and turns its output into grabber
descriptors. The output holds one record per line (NUL also ends a record);
each record is 'path|label', the label being optional.
"""
import logging
import re
from collections.abc import Callable

from epggrab.services.grab_types import GrabberDescriptor
from epggrab.utils.process import spawn_and_store_stdout


logger = logging.getLogger(__name__)

_RECORD_SEPARATOR = re.compile(r"[\n\0]")

NAME_PREFIX = "XMLTV"


def parse_grabber_list(output: bytes | str) -> list[GrabberDescriptor]:
    """
    Parse discovery output into descriptors, preserving record order

    Args:
        output: Raw stdout of the discovery command

    Returns:
        One descriptor per non-blank record
    """
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")

    descriptors = []
    for record in _RECORD_SEPARATOR.split(output):
        fields = record.split("|")
        path = fields[0]
        if not path:
            continue

        label = fields[1].strip() if len(fields) > 1 else ""
        label = label or path
        descriptors.append(
            GrabberDescriptor(id=path, path=path, name=f"{NAME_PREFIX}: {label}")
        )

    return descriptors


def discover_grabbers(
    command: str,
    runner: Callable[[str], bytes] = spawn_and_store_stdout,
) -> list[GrabberDescriptor]:
    """
    Run the discovery command and parse what it reports

    Failure is not fatal: it is logged and no grabbers are returned.
    """
    logger.debug(f"Discovering grabbers with {command}")
    output = runner(command)
    if not output:
        logger.error(f"{command} failed [no output]")
        return []

    descriptors = parse_grabber_list(output)
    logger.info(f"Discovered {len(descriptors)} grabber(s) via {command}")
    for descriptor in descriptors:
        logger.debug(f"  {descriptor.id}: {descriptor.name}")
    return descriptors
