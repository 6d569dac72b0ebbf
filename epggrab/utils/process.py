"""
Subprocess utilities

This module runs external grabber executables and captures their output.
"""
import logging
import subprocess
from time import perf_counter


logger = logging.getLogger(__name__)


def spawn_and_store_stdout(command: str, timeout: float | None = None) -> bytes:
    """
    Run an executable without arguments and return its standard output

    Launch failures, timeouts and non-zero exit codes are logged and reported
    as empty output so callers can treat them as "nothing produced".

    Args:
        command: Path of the executable to run
        timeout: Optional timeout in seconds (None waits indefinitely)

    Returns:
        Captured stdout bytes, or b"" on failure
    """
    logger.debug(f"Spawning {command} (timeout: {timeout or 'disabled'})")
    started = perf_counter()

    try:
        result = subprocess.run(
            [command],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.error(f"{command} timed out after {timeout}s")
        return b""
    except OSError as e:
        logger.error(f"{command} failed to start: {e}")
        return b""

    duration = perf_counter() - started

    if result.returncode != 0:
        stderr_tail = result.stderr.decode("utf-8", errors="replace").strip()[-200:]
        logger.error(
            f"{command} exited with status {result.returncode} after {duration:.2f}s"
            + (f": {stderr_tail}" if stderr_tail else "")
        )
        return b""

    logger.debug(f"{command} produced {len(result.stdout)} bytes in {duration:.2f}s")
    return result.stdout
