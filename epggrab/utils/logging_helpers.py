"""
Structured logging helpers for consistent log formatting.

Provides utilities for structured, clean logging without excessive decorative separators.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from epggrab.services.grab_types import GrabStats


def log_section_start(logger: logging.Logger, section_name: str) -> None:
    """
    Log the start of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being started
    """
    logger.info(f"Starting: {section_name}")


def log_section_end(logger: logging.Logger, section_name: str) -> None:
    """
    Log the end of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being ended
    """
    logger.info(f"Completed: {section_name}")


def log_grab_stats(logger: logging.Logger, module_id: str, stats: GrabStats) -> None:
    """
    Log the counters of one grab pass.

    Args:
        logger: Logger instance
        module_id: Module the pass ran for
        stats: Counters collected during the pass
    """
    logger.info(f"{module_id}: parse stats")
    for name, counters in (
        ("channels", stats.channels),
        ("episodes", stats.episodes),
        ("broadcasts", stats.broadcasts),
    ):
        logger.info(
            f"  {name:<10} tot={counters.total:5d} new={counters.created:5d} mod={counters.modified:5d}"
        )
