"""
XMLTV grabber modules

Registers the socket-fed xmltv module plus one module per discovered grabber
executable, and runs grab passes: grab bytes, load them as a tag tree, merge
the tree into the guide.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from functools import partial
from time import perf_counter

from epggrab.config import CustomSettings, settings as default_settings, setup_logging
from epggrab.database import init_db, session_scope
from epggrab.services.channel_registry import ChannelRegistry
from epggrab.services.grab_types import GrabberModule, GrabStats, ModuleCapability
from epggrab.services.grabber_discovery_service import discover_grabbers
from epggrab.services.guide_store import GuideStore
from epggrab.services.tag_tree import load_document
from epggrab.services.xmltv_parser_service import XmltvReconciler
from epggrab.utils.logging_helpers import log_grab_stats, log_section_end, log_section_start
from epggrab.utils.process import spawn_and_store_stdout
from epggrab.utils.timezone import dispatch_clock


logger = logging.getLogger(__name__)

Runner = Callable[..., bytes]


class GrabberError(RuntimeError):
    """Raised when a module cannot be grabbed from"""
    pass


class ModuleRegistry:
    """Grabber modules in registration order, keyed by id."""

    def __init__(self) -> None:
        self._modules: dict[str, GrabberModule] = {}

    def register(self, module: GrabberModule) -> bool:
        if module.id in self._modules:
            logger.warning("Module %s already registered, ignoring duplicate", module.id)
            return False
        self._modules[module.id] = module
        logger.debug("Registered module %s (%s)", module.id, module.name)
        return True

    def get(self, module_id: str) -> GrabberModule | None:
        return self._modules.get(module_id)

    def simple_modules(self) -> list[GrabberModule]:
        return [module for module in self._modules.values() if module.is_simple]

    def __iter__(self) -> Iterator[GrabberModule]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)


def grab_module(
    module: GrabberModule,
    *,
    timeout: float | None = None,
    runner: Runner = spawn_and_store_stdout,
) -> bytes:
    """Run a simple module's grabber executable and return the document it prints."""
    logger.info(f"{module.id}: grab {module.path}")
    started = perf_counter()
    data = runner(module.path, timeout=timeout)
    logger.info(f"{module.id}: grab took {perf_counter() - started:.0f} seconds")
    return data


def load_grabbers(
    modules: ModuleRegistry,
    channels: ChannelRegistry,
    reconciler: XmltvReconciler,
    command: str,
    grab: Callable[[GrabberModule], bytes],
    runner: Runner = spawn_and_store_stdout,
) -> list[GrabberModule]:
    """
    Register one simple module per grabber the discovery command reports

    Returns:
        The modules registered, in discovery order
    """
    registered = []
    for descriptor in discover_grabbers(command, runner=runner):
        module = GrabberModule(
            id=descriptor.id,
            name=descriptor.name,
            path=descriptor.path,
            capabilities=ModuleCapability.SIMPLE,
            channels=channels,
            trans=load_document,
            parse=reconciler.parse_document,
            grab=grab,
        )
        if modules.register(module):
            registered.append(module)
    return registered


def xmltv_init(
    modules: ModuleRegistry,
    store: GuideStore,
    channels: ChannelRegistry,
    *,
    settings: CustomSettings = default_settings,
    runner: Runner = spawn_and_store_stdout,
    clock: Callable[[], int] = dispatch_clock,
) -> GrabberModule:
    """
    Register the xmltv modules

    The external module receives documents over a socket; the simple modules
    found by the discovery command share its channels and parse entry point.

    Returns:
        The external module

    Raises:
        ValueError: If the store and the channel registry use different sessions
    """
    if store.session is not channels.session:
        raise ValueError("Guide store and channel registry must share one session")

    reconciler = XmltvReconciler(channels, store, clock=clock)

    external = GrabberModule(
        id="xmltv",
        name="XMLTV",
        path=settings.socket_path,
        capabilities=ModuleCapability.EXTERNAL,
        channels=channels,
        trans=load_document,
        parse=reconciler.parse_document,
    )
    modules.register(external)

    grab = partial(grab_module, timeout=settings.grab_timeout_sec or None, runner=runner)
    load_grabbers(
        modules,
        channels,
        reconciler,
        settings.find_grabbers_command,
        grab,
        runner=runner,
    )
    return external


def ingest(module: GrabberModule, data: bytes) -> GrabStats:
    """
    Load a document produced for a module and merge it into the guide

    Commits the session when the pass changed anything; an unloadable
    document is logged and changes nothing.
    """
    stats = GrabStats()
    section = f"{module.id} parse"
    log_section_start(logger, section)

    try:
        document = module.trans(data)
        if document is None:
            logger.error(f"{module.id}: no document to parse")
            return stats

        session = module.channels.session
        try:
            changed = module.parse(document, stats)
            if changed:
                session.commit()
        except Exception:
            session.rollback()
            raise

        log_grab_stats(logger, module.id, stats)
        return stats
    finally:
        log_section_end(logger, section)


def run_grab(module: GrabberModule) -> GrabStats:
    """Grab from a simple module and ingest the result."""
    if module.is_external:
        raise GrabberError(f"Module {module.id} receives documents over its socket")
    if module.grab is None:
        raise GrabberError(f"Module {module.id} has no grab entry point")

    data = module.grab(module)
    if not data:
        logger.error(f"{module.id}: grab returned no data")
        return GrabStats()

    return ingest(module, data)


def run_grab_cycle(
    *,
    settings: CustomSettings = default_settings,
    runner: Runner = spawn_and_store_stdout,
    clock: Callable[[], int] = dispatch_clock,
) -> dict[str, GrabStats]:
    """
    Register the xmltv modules and grab from every simple one

    Configures logging, opens the configured database and runs every module
    on one session.

    Returns:
        Stats per module id, in registration order
    """
    setup_logging(settings.log_level)
    init_db(settings.database_path)
    log_section_start(logger, "grab cycle")

    results: dict[str, GrabStats] = {}
    with session_scope(begin=False) as session:
        modules = ModuleRegistry()
        xmltv_init(
            modules,
            GuideStore(session),
            ChannelRegistry(session),
            settings=settings,
            runner=runner,
            clock=clock,
        )
        for module in modules.simple_modules():
            results[module.id] = run_grab(module)

    log_section_end(logger, "grab cycle")
    return results
